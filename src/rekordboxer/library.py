'''
# Summary
Reads and writes Rekordbox XML collections ('DJ_PLAYLISTS' documents).

    - parse:  Builds a Library from XML bytes.
    - write:  Serializes a Library to XML bytes.

# Format
    <DJ_PLAYLISTS Version="1.0.0">
        <PRODUCT Name="rekordbox" Version="6.8.5" Company="AlphaTheta"/>
        <COLLECTION Entries="1">
            <TRACK TrackID="1" Name="..." Location="file://localhost/..." ...>
                <TEMPO Inizio="0.520" Bpm="126.00" Metro="4/4" Battito="1"/>
                <POSITION_MARK Name="" Type="0" Start="0.520" Num="-1"/>
            </TRACK>
        </COLLECTION>
        <PLAYLISTS>
            <NODE Type="0" Name="ROOT" Count="1">
                <NODE Name="House" Type="1" KeyType="0" Entries="1">
                    <TRACK Key="1"/>
                </NODE>
            </NODE>
        </PLAYLISTS>
    </DJ_PLAYLISTS>

Numeric attributes are written with fixed precision so repeated write/parse cycles are stable.
'''

import os
import logging
import xml.etree.ElementTree as ET
from typing import Any, Callable

from . import constants
from .models import Library, Track, Tempo, PositionMark, PositionMarkType, Node, NodeType, xml_safe_text

# Errors
class InvalidFormatError(ValueError):
    '''The document is not a Rekordbox XML collection.'''

# Value conversion
def _to_int(value: str | None) -> int:
    try:
        return int(value) if value is not None else 0
    except ValueError:
        return 0

def _to_float(value: str | None) -> float:
    try:
        return float(value) if value is not None else 0.0
    except ValueError:
        return 0.0

def _to_optional_int(value: str | None) -> int | None:
    try:
        return int(value) if value is not None else None
    except ValueError:
        return None

def _to_optional_float(value: str | None) -> float | None:
    try:
        return float(value) if value is not None else None
    except ValueError:
        return None

_format_bpm: Callable[[float], str]    = lambda v: f"{v:.2f}"
_format_rate: Callable[[float], str]   = lambda v: f"{v:.0f}"
_format_time: Callable[[float], str]   = lambda v: f"{v:.3f}"

# TRACK attribute name -> (Track field, parse, format), in write order
TRACK_ATTRIBUTES: dict[str, tuple[str, Callable[[str | None], Any], Callable[[Any], str]]] = {
    constants.ATTR_TRACK_ID      : ('track_id', _to_int, str),
    constants.ATTR_TITLE         : ('name', lambda v: v or '', str),
    constants.ATTR_ARTIST        : ('artist', lambda v: v or '', str),
    constants.ATTR_COMPOSER      : ('composer', lambda v: v or '', str),
    constants.ATTR_ALBUM         : ('album', lambda v: v or '', str),
    constants.ATTR_GROUPING      : ('grouping', lambda v: v or '', str),
    constants.ATTR_GENRE         : ('genre', lambda v: v or '', str),
    constants.ATTR_KIND          : ('kind', lambda v: v or '', str),
    constants.ATTR_SIZE          : ('size', _to_int, str),
    constants.ATTR_TOTAL_TIME    : ('total_time', _to_int, str),
    constants.ATTR_DISC_NUMBER   : ('disc_number', _to_int, str),
    constants.ATTR_TRACK_NUMBER  : ('track_number', _to_int, str),
    constants.ATTR_YEAR          : ('year', _to_int, str),
    constants.ATTR_AVG_BPM       : ('average_bpm', _to_float, _format_bpm),
    constants.ATTR_DATE_ADDED    : ('date_added', lambda v: v or '', str),
    constants.ATTR_DATE_MODIFIED : ('date_modified', lambda v: v or '', str),
    constants.ATTR_BIT_RATE      : ('bit_rate', _to_int, str),
    constants.ATTR_SAMPLE_RATE   : ('sample_rate', _to_float, _format_rate),
    constants.ATTR_COMMENTS      : ('comments', lambda v: v or '', str),
    constants.ATTR_PLAY_COUNT    : ('play_count', _to_int, str),
    constants.ATTR_LAST_PLAYED   : ('last_played', lambda v: v or '', str),
    constants.ATTR_RATING        : ('rating', _to_int, str),
    constants.ATTR_LOCATION      : ('location', lambda v: v or '', str),
    constants.ATTR_REMIXER       : ('remixer', lambda v: v or '', str),
    constants.ATTR_KEY           : ('tonality', lambda v: v or '', str),
    constants.ATTR_LABEL         : ('label', lambda v: v or '', str),
    constants.ATTR_MIX           : ('mix', lambda v: v or '', str),
    constants.ATTR_COLOUR        : ('colour', lambda v: v or '', str),
}

# Parsing
def _parse_tempo(element: ET.Element) -> Tempo:
    return Tempo(inizio=_to_float(element.get(constants.ATTR_INIZIO)),
                 bpm=_to_float(element.get(constants.ATTR_BPM)),
                 metro=element.get(constants.ATTR_METRO, ''),
                 battito=_to_int(element.get(constants.ATTR_BATTITO)))

def _parse_position_mark(element: ET.Element) -> PositionMark:
    type_value = _to_int(element.get(constants.ATTR_TYPE))
    try:
        mark_type = PositionMarkType(type_value)
    except ValueError:
        logging.warning(f"unknown position mark type '{type_value}', reading as cue")
        mark_type = PositionMarkType.CUE

    return PositionMark(name=element.get(constants.ATTR_NAME, ''),
                        type=mark_type,
                        start=_to_float(element.get(constants.ATTR_START)),
                        end=_to_optional_float(element.get(constants.ATTR_END)),
                        num=_to_int(element.get(constants.ATTR_NUM)),
                        red=_to_optional_int(element.get(constants.ATTR_RED)),
                        green=_to_optional_int(element.get(constants.ATTR_GREEN)),
                        blue=_to_optional_int(element.get(constants.ATTR_BLUE)))

def parse_track(element: ET.Element) -> Track:
    '''Builds a Track from a COLLECTION/TRACK element, keeping unknown attributes for passthrough.'''
    values: dict[str, Any] = {}
    for attr_name, (field_name, parse_value, _) in TRACK_ATTRIBUTES.items():
        values[field_name] = parse_value(element.get(attr_name))
    track = Track(**values)

    for name, value in element.attrib.items():
        if name not in TRACK_ATTRIBUTES:
            track.raw_attributes[name] = value

    track.tempos = [_parse_tempo(e) for e in element.findall(constants.TAG_TEMPO)]
    track.position_marks = [_parse_position_mark(e) for e in element.findall(constants.TAG_POSITION_MARK)]
    return track

def parse_node(element: ET.Element) -> Node:
    '''Recursively builds a Node from a PLAYLISTS/NODE element.'''
    name = element.get(constants.ATTR_NAME, '')
    if _to_int(element.get(constants.ATTR_TYPE)) == NodeType.PLAYLIST:
        keys = [_to_int(track.get(constants.ATTR_TRACK_KEY)) for track in element.findall(constants.TAG_TRACK)]
        return Node.playlist(name, keys)
    children = [parse_node(child) for child in element.findall(constants.TAG_NODE)]
    return Node.folder(name, children)

def parse(data: bytes) -> Library:
    '''Parses XML collection bytes into a Library.

    Raises:
        InvalidFormatError: The data isn't XML, or the root element isn't DJ_PLAYLISTS.
    '''
    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise InvalidFormatError(f"unable to parse collection XML: {e}") from e
    if root.tag != constants.TAG_DJ_PLAYLISTS:
        raise InvalidFormatError(f"expected root element '{constants.TAG_DJ_PLAYLISTS}', found '{root.tag}'")

    library = Library()

    product = root.find(constants.TAG_PRODUCT)
    if product is not None:
        library.product_name = product.get(constants.ATTR_NAME, '')
        library.product_version = product.get(constants.ATTR_VERSION, '')
        library.product_company = product.get(constants.ATTR_COMPANY, '')

    collection = root.find(constants.TAG_COLLECTION)
    if collection is not None:
        for element in collection.findall(constants.TAG_TRACK):
            track = parse_track(element)
            if track.track_id in library.tracks:
                logging.warning(f"duplicate TrackID '{track.track_id}', keeping the last entry")
            library.tracks[track.track_id] = track

    playlists = root.find(constants.TAG_PLAYLISTS)
    if playlists is not None:
        root_node = playlists.find(constants.TAG_NODE)
        if root_node is not None:
            library.root = parse_node(root_node)
            if not library.root.is_folder:
                logging.warning(f"root node '{library.root.name}' is a playlist, moving it under a new '{constants.ROOT_NODE_NAME}' folder")
                library.root = Node.folder(constants.ROOT_NODE_NAME, [library.root])

    logging.debug(f"parsed collection: {len(library.tracks)} tracks")
    return library

# Writing
def _track_element(track: Track) -> ET.Element:
    element = ET.Element(constants.TAG_TRACK)
    for attr_name, (field_name, _, format_value) in TRACK_ATTRIBUTES.items():
        element.set(attr_name, format_value(getattr(track, field_name)))

    for name, value in track.raw_attributes.items():
        if name not in TRACK_ATTRIBUTES:
            element.set(name, value)

    for tempo in track.tempos:
        ET.SubElement(element, constants.TAG_TEMPO, {
            constants.ATTR_INIZIO  : _format_time(tempo.inizio),
            constants.ATTR_BPM     : _format_bpm(tempo.bpm),
            constants.ATTR_METRO   : tempo.metro,
            constants.ATTR_BATTITO : str(tempo.battito),
        })

    for mark in track.position_marks:
        mark_element = ET.SubElement(element, constants.TAG_POSITION_MARK)
        mark_element.set(constants.ATTR_NAME, mark.name)
        mark_element.set(constants.ATTR_TYPE, str(int(mark.type)))
        mark_element.set(constants.ATTR_START, _format_time(mark.start))
        if mark.end is not None:
            mark_element.set(constants.ATTR_END, _format_time(mark.end))
        mark_element.set(constants.ATTR_NUM, str(mark.num))
        for attr_name, channel in ((constants.ATTR_RED, mark.red),
                                   (constants.ATTR_GREEN, mark.green),
                                   (constants.ATTR_BLUE, mark.blue)):
            if channel is not None:
                mark_element.set(attr_name, str(channel))
    return element

def _node_element(node: Node, track_ids: set[int]) -> ET.Element:
    element = ET.Element(constants.TAG_NODE)
    if node.is_folder:
        element.set(constants.ATTR_TYPE, str(int(NodeType.FOLDER)))
        element.set(constants.ATTR_NAME, node.name)
        element.set(constants.ATTR_COUNT, str(len(node.children)))
        for child in node.children:
            element.append(_node_element(child, track_ids))
        return element

    # only keys that resolve to a track in this collection are written
    keys = [key for key in node.track_keys if key in track_ids]
    if len(keys) != len(node.track_keys):
        logging.warning(f"playlist '{node.name}': dropped {len(node.track_keys) - len(keys)} keys with no matching track")
    element.set(constants.ATTR_NAME, node.name)
    element.set(constants.ATTR_TYPE, str(int(NodeType.PLAYLIST)))
    element.set(constants.ATTR_KEY_TYPE, '0')
    element.set(constants.ATTR_ENTRIES, str(len(keys)))
    for key in keys:
        ET.SubElement(element, constants.TAG_TRACK, {constants.ATTR_TRACK_KEY : str(key)})
    return element

def build_root(library: Library) -> ET.Element:
    '''Builds the DJ_PLAYLISTS element for the given library.'''
    root = ET.Element(constants.TAG_DJ_PLAYLISTS, {constants.ATTR_VERSION : constants.DOCUMENT_VERSION})
    ET.SubElement(root, constants.TAG_PRODUCT, {
        constants.ATTR_NAME    : library.product_name,
        constants.ATTR_VERSION : library.product_version,
        constants.ATTR_COMPANY : library.product_company,
    })

    collection = ET.SubElement(root, constants.TAG_COLLECTION, {constants.ATTR_ENTRIES : str(len(library.tracks))})
    for track_id in sorted(library.tracks):
        collection.append(_track_element(library.tracks[track_id]))

    playlists = ET.SubElement(root, constants.TAG_PLAYLISTS)
    playlists.append(_node_element(library.root, set(library.tracks)))
    _sanitize_attributes(root)
    return root

def _sanitize_attributes(root: ET.Element) -> None:
    '''Replaces characters that XML can't hold in every attribute value under `root`.'''
    for element in root.iter():
        for name, value in list(element.attrib.items()):
            safe = xml_safe_text(value)
            if safe != value:
                logging.warning(f"{element.tag} attribute '{name}': replaced characters not allowed in XML")
                element.set(name, safe)

def write(library: Library) -> bytes:
    '''Serializes the library to UTF-8 XML bytes with a declaration.'''
    root = build_root(library)
    ET.indent(root)
    return ET.tostring(root, encoding='UTF-8', xml_declaration=True)

# File helpers
def load_collection(path: str) -> Library:
    '''Returns the Library stored in the XML collection at `path`.

    Raises:
        OSError: The file can't be read.
        InvalidFormatError: The file isn't a Rekordbox XML collection.
    '''
    with open(path, 'rb') as file:
        data = file.read()
    try:
        return parse(data)
    except InvalidFormatError as e:
        logging.error(f"unable to parse collection at '{path}':\n{e}")
        raise

def write_collection(library: Library, path: str) -> None:
    '''Writes the library to the XML collection at `path`, creating parent directories.'''
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, 'wb') as file:
        file.write(write(library))
    logging.info(f"wrote collection with {len(library.tracks)} tracks to '{path}'")
