'''
# Summary
Reconciles a Rekordbox XML collection with the music folder on disk.

    - preview:  Scans the source folder and reports new, removed, and unchanged tracks.
    - apply:    Scans, adds new tracks, removes missing tracks, rebuilds the playlist tree to mirror
                the folder layout, then writes the collection and the TrackID map.

# Playlist tree
The playlist tree is rebuilt from scratch on every apply, so hand-made playlists are replaced.
    - A folder with only audio files becomes a playlist.
    - A folder with only subfolders becomes a folder.
    - A folder with both becomes a folder whose first child is a playlist of its own files.
'''

import os
import sys
import logging
import argparse
from dataclasses import dataclass
from datetime import date

from . import common
from . import config
from . import constants
from . import library as collection_io
from .models import Library, Track, Node, encode_location, xml_safe_text
from .scanner import ScannedFile, ScannedFolder, scan
from .track_ids import TrackIDMap

# Data classes
@dataclass(frozen=True)
class SyncDiff:
    '''Differences between a collection and a folder scan.'''
    new_files: list[ScannedFile]
    removed_tracks: list[Track]
    unchanged_count: int
    folders: list[ScannedFolder]

    @property
    def is_empty(self) -> bool:
        return not self.new_files and not self.removed_tracks

@dataclass
class SyncResult:
    '''Results from a complete sync run.'''
    diff: SyncDiff
    library: Library
    tracks_added: int
    tracks_removed: int

# Classes
class Namespace(argparse.Namespace):
    '''Command-line arguments for sync module.'''

    # Required
    function: str

    # Optional (alphabetical)
    collection: str
    dry_run: bool
    id_map: str
    keep_removed: bool
    source: str

    # Function constants
    FUNCTION_PREVIEW = 'preview'
    FUNCTION_APPLY = 'apply'

    FUNCTIONS = {FUNCTION_PREVIEW, FUNCTION_APPLY}

def parse_args(valid_functions: set[str], argv: list[str]) -> Namespace:
    '''Parse command line arguments.

    Args:
        valid_functions: Set of valid function names
        argv: Argument list, excluding the program name
    '''
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)

    # Required: function only
    parser.add_argument('function', type=str,
                       help=f"Function to run. One of: {', '.join(sorted(valid_functions))}")

    # Optional: all function parameters (alphabetical)
    parser.add_argument('--collection', '-c', type=str, default=config.COLLECTION_PATH,
                       help='Rekordbox XML collection file path')
    parser.add_argument('--dry-run', '-d', action='store_true',
                       help='Compute and log the changes without writing the collection or TrackID map')
    parser.add_argument('--id-map', type=str, default=config.ID_MAP_PATH,
                       help='TrackID map file path')
    parser.add_argument('--keep-removed', '-k', action='store_true',
                       help='Keep tracks whose files are missing instead of removing them')
    parser.add_argument('--source', '-s', type=str, default=config.SOURCE_PATH,
                       help='Music folder to scan')

    # Parse into Namespace
    args = parser.parse_args(argv, namespace=Namespace())

    # Normalize paths (only if not None)
    common.normalize_arg_paths(args, ['collection', 'id_map', 'source'])

    # Validate function
    if args.function not in valid_functions:
        parser.error(f"invalid function '{args.function}'\n"
                    f"expect one of: {', '.join(sorted(valid_functions))}")

    # Function-specific validation
    _validate_function_args(parser, args)

    return args

def _validate_function_args(parser: argparse.ArgumentParser, args: Namespace) -> None:
    '''Validate function-specific required arguments.'''

    # All functions require --source and --collection
    if not args.source:
        parser.error(f"'{args.function}' requires --source")
    if not args.collection:
        parser.error(f"'{args.function}' requires --collection")
    if not os.path.isdir(args.source):
        parser.error(f"--source '{args.source}' is not a directory")

# Helper functions
def audio_kind(extension: str) -> str:
    '''Returns the Kind label for a file extension, with or without the leading dot.'''
    extension = extension.lower()
    if extension and not extension.startswith('.'):
        extension = f".{extension}"
    return constants.MAPPING_KIND.get(extension, constants.KIND_DEFAULT)

def create_track(file: ScannedFile, track_id: int, date_added: date) -> Track:
    '''Creates a collection Track for a newly scanned file.'''
    return Track(track_id=track_id,
                 name=xml_safe_text(os.path.splitext(file.name)[0]),
                 location=encode_location(file.path),
                 size=file.size,
                 kind=audio_kind(file.extension),
                 date_added=date_added.strftime(constants.DATE_ADDED_FORMAT))

def path_index(library: Library) -> dict[str, int]:
    '''Maps each track's system path to its TrackID.'''
    return {track.path: track.track_id for track in library.tracks.values()}

def build_node(folder: ScannedFolder, track_ids: dict[str, int]) -> Node | None:
    '''Maps a scanned folder to a playlist tree node, or None if nothing in it resolves to a track.

    Args:
        folder: The scanned folder
        track_ids: System path to TrackID mapping, files missing from it are skipped
    '''
    keys = [track_ids[f.path] for f in folder.files if f.path in track_ids]
    children: list[Node] = []
    for child in folder.children:
        node = build_node(child, track_ids)
        if node:
            children.append(node)

    if not children:
        return Node.playlist(folder.name, keys) if keys else None
    if not keys:
        return Node.folder(folder.name, children)
    return Node.folder(folder.name, [Node.playlist(folder.name, keys), *children])

def build_playlist_tree(folders: list[ScannedFolder], track_ids: dict[str, int]) -> Node:
    '''Builds a ROOT folder mirroring the scanned folder layout.'''
    children: list[Node] = []
    for folder in folders:
        node = build_node(folder, track_ids)
        if node:
            children.append(node)
    return Node.folder(constants.ROOT_NODE_NAME, children)

def summarize(sync_diff: SyncDiff) -> str:
    return (f"{len(sync_diff.new_files)} new, {len(sync_diff.removed_tracks)} removed, "
            f"{sync_diff.unchanged_count} unchanged")

# Primary functions
def diff(library: Library, folders: list[ScannedFolder]) -> SyncDiff:
    '''Compares the collection with a folder scan by system path.

    Returns:
        SyncDiff with the scanned files missing from the collection, the collection tracks
        missing from the scan (sorted by TrackID), and the number of paths found in both.
    '''
    existing_paths = {track.path for track in library.tracks.values()}

    scanned_paths: set[str] = set()
    new_files: list[ScannedFile] = []
    for folder in folders:
        for file in folder.iter_files():
            scanned_paths.add(file.path)
            if file.path not in existing_paths:
                new_files.append(file)

    removed_tracks = sorted((track for track in library.tracks.values() if track.path not in scanned_paths),
                            key=lambda track: track.track_id)
    unchanged_count = len(existing_paths & scanned_paths)

    sync_diff = SyncDiff(new_files=new_files,
                         removed_tracks=removed_tracks,
                         unchanged_count=unchanged_count,
                         folders=list(folders))
    logging.info(f"diff: {summarize(sync_diff)}")
    return sync_diff

def apply(sync_diff: SyncDiff,
          library: Library,
          id_map: TrackIDMap,
          removals: set[int],
          date_added: date | None = None) -> None:
    '''Applies the approved changes from `sync_diff` to the library in place.

    Removals run first, so a removed path that is re-added gets a fresh TrackID.
    New tracks get a stable TrackID from the map, then the playlist tree is rebuilt
    from the scanned folders.

    Args:
        sync_diff: Result of diff() for this library
        library: The collection to update
        id_map: TrackID assignments, updated in place
        removals: TrackIDs approved for removal
        date_added: DateAdded for new tracks, defaults to today
    '''
    # remove approved tracks
    for track_id in sorted(removals):
        track = library.tracks.pop(track_id, None)
        if track is None:
            logging.warning(f"skip removal of unknown TrackID {track_id}")
            continue
        id_map.remove(track.path)
        logging.debug(f"removed track {track_id}: '{track.path}'")

    # add new tracks
    today = date_added or date.today()
    for file in sync_diff.new_files:
        track_id = id_map.get_or_assign(file.path)
        existing = library.tracks.get(track_id)
        while existing is not None and existing.path != file.path:
            logging.warning(f"TrackID {track_id} for '{file.path}' is used by '{existing.path}', reassigning")
            id_map.remove(file.path)
            track_id = id_map.get_or_assign(file.path)
            existing = library.tracks.get(track_id)
        library.tracks[track_id] = create_track(file, track_id, today)
        logging.debug(f"added track {track_id}: '{file.path}'")

    # rebuild the playlist tree
    library.root = build_playlist_tree(sync_diff.folders, path_index(library))
    logging.info(f"applied sync: {len(library.tracks)} tracks, {len(library.root.children)} top-level nodes")

def preview_sync(source: str, collection_path: str) -> SyncDiff:
    '''Scans the source folder and diffs it against the collection, which may not exist yet.'''
    library = _load_or_create(collection_path)
    return diff(library, scan(source))

def run_sync(source: str,
             collection_path: str,
             id_map_path: str,
             remove: bool = True,
             dry_run: bool = False) -> SyncResult:
    '''Runs a full sync of the source folder into the collection.

    Args:
        source: Music folder to scan
        collection_path: XML collection, created if missing
        id_map_path: TrackID map, created if missing
        remove: Whether tracks missing from the source are removed
        dry_run: If True, skip writing the collection and TrackID map

    Raises:
        OSError: A path can't be read or written.
        InvalidFormatError: The existing collection isn't a Rekordbox XML collection.
    '''
    library = _load_or_create(collection_path)
    id_map = TrackIDMap.load(id_map_path) if os.path.exists(id_map_path) else TrackIDMap()
    id_map.adopt(library)

    sync_diff = diff(library, scan(source))
    removals = {track.track_id for track in sync_diff.removed_tracks} if remove else set()
    apply(sync_diff, library, id_map, removals)

    if dry_run:
        common.log_dry_run('write collection', collection_path)
        common.log_dry_run('write TrackID map', id_map_path)
    else:
        collection_io.write_collection(library, collection_path)
        id_map.save(id_map_path)

    return SyncResult(diff=sync_diff,
                      library=library,
                      tracks_added=len(sync_diff.new_files),
                      tracks_removed=len(removals))

def _load_or_create(collection_path: str) -> Library:
    if os.path.exists(collection_path):
        return collection_io.load_collection(collection_path)
    logging.info(f"no collection at '{collection_path}', starting empty")
    return Library()

def main(argv: list[str]) -> None:
    common.configure_log_module(__file__, level=logging.DEBUG)
    script_args = parse_args(Namespace.FUNCTIONS, argv[1:])

    logging.info(f"running function '{script_args.function}'")
    if script_args.function == Namespace.FUNCTION_PREVIEW:
        sync_diff = preview_sync(script_args.source, script_args.collection)
        if sync_diff.is_empty:
            print('No changes - collection is up to date!')
        if sync_diff.new_files:
            print(f'NEW TRACKS ({len(sync_diff.new_files)}):')
            for file in sync_diff.new_files:
                print(f'  {file.path}')
        if sync_diff.removed_tracks:
            print(f'REMOVED TRACKS ({len(sync_diff.removed_tracks)}):')
            for track in sync_diff.removed_tracks:
                print(f'  [{track.track_id}] {track.path}')
        print(f'Summary: {summarize(sync_diff)}')

    elif script_args.function == Namespace.FUNCTION_APPLY:
        result = run_sync(script_args.source,
                          script_args.collection,
                          script_args.id_map,
                          remove=not script_args.keep_removed,
                          dry_run=script_args.dry_run)
        print(f'Synced: {result.tracks_added} added, {result.tracks_removed} removed. '
              f'Collection now has {len(result.library.tracks)} tracks.')

if __name__ == '__main__':
    main(sys.argv)
