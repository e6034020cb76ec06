'''
In-memory representation of a Rekordbox library: tracks keyed by TrackID and the
folder/playlist node tree that references them.
'''

import os
import re
from dataclasses import dataclass, field
from enum import IntEnum
from urllib.parse import quote, unquote_to_bytes

from . import constants

# characters outside the XML 1.0 Char production, including lone surrogates from undecodable filenames
_XML_ILLEGAL_CHARS = re.compile('[^\t\n\r\x20-\U0000d7ff\U0000e000-\U0000fffd\U00010000-\U0010ffff]')

# Location helpers
def encode_location(path: str) -> str:
    '''Transforms the given system path to an XML collection location.
    Paths are escaped from their file system bytes, so undecodable filenames survive the round trip.

    Example:
        >>> encode_location('/Users/dj/Music/Summer Vibes.mp3')
        'file://localhost/Users/dj/Music/Summer%20Vibes.mp3'
    '''
    return f"{constants.REKORDBOX_ROOT}{quote(os.fsencode(path), safe=constants.URL_SAFE_CHARS)}"

def decode_location(location: str) -> str:
    '''Transforms the given XML collection location to a system path.'''
    return os.fsdecode(unquote_to_bytes(location.removeprefix(constants.REKORDBOX_ROOT)))

# Text helpers
def xml_safe_text(text: str) -> str:
    '''Replaces each character that can't appear in an XML document with U+FFFD.'''
    return _XML_ILLEGAL_CHARS.sub(constants.REPLACEMENT_CHAR, text)

# Classes
@dataclass
class Tempo:
    '''A beat grid point.'''
    inizio: float
    bpm: float
    metro: str
    battito: int

class PositionMarkType(IntEnum):
    CUE      = 0
    FADE_IN  = 1
    FADE_OUT = 2
    LOAD     = 3
    LOOP     = 4

@dataclass
class PositionMark:
    '''A cue point or loop. Slots >= 0 are hot cues, -1 is the memory cue.'''
    name: str
    type: PositionMarkType
    start: float
    end: float | None = None
    num: int = constants.MEMORY_CUE_NUM
    red: int | None = None
    green: int | None = None
    blue: int | None = None

    @property
    def is_hot_cue(self) -> bool:
        return self.num >= 0

    @property
    def is_memory_cue(self) -> bool:
        return self.num == constants.MEMORY_CUE_NUM

    @property
    def is_loop(self) -> bool:
        return self.type == PositionMarkType.LOOP

    @property
    def color(self) -> tuple[int, int, int] | None:
        if self.red is None or self.green is None or self.blue is None:
            return None
        return (self.red, self.green, self.blue)

@dataclass
class Track:
    '''Represents a TRACK record in the XML collection.'''
    track_id: int
    name: str = ''
    artist: str = ''
    composer: str = ''
    album: str = ''
    grouping: str = ''
    genre: str = ''
    kind: str = ''
    size: int = 0
    total_time: int = 0
    disc_number: int = 0
    track_number: int = 0
    year: int = 0
    average_bpm: float = 0.0
    date_added: str = ''
    date_modified: str = ''
    bit_rate: int = 0
    sample_rate: float = 0.0
    comments: str = ''
    play_count: int = 0
    last_played: str = ''
    rating: int = 0
    location: str = ''
    remixer: str = ''
    tonality: str = ''
    label: str = ''
    mix: str = ''
    colour: str = ''

    tempos: list[Tempo] = field(default_factory=list)
    position_marks: list[PositionMark] = field(default_factory=list)
    raw_attributes: dict[str, str] = field(default_factory=dict)

    @property
    def path(self) -> str:
        '''The system path decoded from the location.'''
        return decode_location(self.location)

    @property
    def filename(self) -> str:
        return os.path.basename(self.path)

    @property
    def stars(self) -> int:
        return Track.rating_to_stars(self.rating)

    @staticmethod
    def rating_to_stars(rating: int) -> int:
        '''Converts a 0-255 rating to 0-5 stars.'''
        if rating <= 0:
            return 0
        return min(rating // constants.RATING_STEP, constants.MAX_STARS)

    @staticmethod
    def stars_to_rating(stars: int) -> int:
        '''Converts 0-5 stars to a 0-255 rating.'''
        return stars * constants.RATING_STEP

class NodeType(IntEnum):
    FOLDER   = 0
    PLAYLIST = 1

@dataclass
class Node:
    '''A folder (children only) or playlist (track keys only) in the playlist tree.'''
    type: NodeType
    name: str
    children: list['Node'] = field(default_factory=list)
    track_keys: list[int] = field(default_factory=list)

    @staticmethod
    def folder(name: str, children: list['Node'] | None = None) -> 'Node':
        return Node(NodeType.FOLDER, name, children=list(children or []))

    @staticmethod
    def playlist(name: str, track_keys: list[int] | None = None) -> 'Node':
        return Node(NodeType.PLAYLIST, name, track_keys=list(track_keys or []))

    @property
    def is_folder(self) -> bool:
        return self.type == NodeType.FOLDER

    @property
    def is_playlist(self) -> bool:
        return self.type == NodeType.PLAYLIST

def _root_node() -> Node:
    return Node.folder(constants.ROOT_NODE_NAME)

@dataclass
class Library:
    '''The full collection: product info, tracks by TrackID and the playlist tree.'''
    product_name: str = constants.PRODUCT_NAME
    product_version: str = ''
    product_company: str = constants.PRODUCT_COMPANY
    tracks: dict[int, Track] = field(default_factory=dict)
    root: Node = field(default_factory=_root_node)

    def playlist_paths(self) -> list[str]:
        '''Returns every playlist as a slash-joined path below ROOT, in tree order.

        Example:
            ROOT -> House (folder) -> Deep House (playlist) yields ['House/Deep House']
        '''
        paths: list[str] = []

        def collect(node: Node, prefix: str) -> None:
            path = f"{prefix}/{node.name}" if prefix else node.name
            if node.is_playlist:
                paths.append(path)
                return
            for child in node.children:
                collect(child, path)

        for child in self.root.children:
            collect(child, '')
        return paths

    def tracks_for_playlists(self, playlist_paths: set[str]) -> list[Track]:
        '''Returns the unique tracks referenced by the given playlist paths, in tree order.
        Keys that don't resolve to a track in the collection are skipped.
        '''
        tracks: list[Track] = []
        seen: set[int] = set()

        def collect(node: Node, prefix: str) -> None:
            path = f"{prefix}/{node.name}" if prefix else node.name
            if node.is_folder:
                for child in node.children:
                    collect(child, path)
                return
            if path not in playlist_paths:
                return
            for key in node.track_keys:
                track = self.tracks.get(key)
                if key in seen or track is None:
                    continue
                seen.add(key)
                tracks.append(track)

        for child in self.root.children:
            collect(child, '')
        return tracks
