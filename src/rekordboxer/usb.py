'''
# Summary
Refreshes audio files already deployed to a removable drive for standalone players.

    - plan:  Lists the files of the selected playlists whose drive copy differs from the source.
    - copy:  Plans, then overwrites each differing drive copy in place.

# Assumptions
* Rekordbox handles the initial export, so only files already on the drive are updated, never created.
* Drive copies are matched by filename. The 'Contents' directory is searched when present,
  otherwise the whole drive. When two drive files share a name, the first one found wins.
* Copies are not atomic: the destination is removed before copying, so a failure mid-copy
  can leave it missing. Re-run the plan after a failure.
'''

import os
import sys
import json
import shutil
import logging
import argparse
from dataclasses import dataclass, field
from typing import Any, Callable

from . import common
from . import config
from . import constants
from . import library as collection_io
from .models import Track

# Data classes
@dataclass(frozen=True)
class FileCopy:
    '''Overwrite the drive copy at `destination` with `source`.'''
    source: str
    destination: str
    filename: str

@dataclass(frozen=True)
class USBSyncPlan:
    files_to_copy: list[FileCopy]
    usb_root: str

    def select(self, filenames: set[str]) -> 'USBSyncPlan':
        '''Returns a plan with only the given filenames.'''
        return USBSyncPlan([c for c in self.files_to_copy if c.filename in filenames], self.usb_root)

    def without(self, filenames: set[str]) -> 'USBSyncPlan':
        '''Returns a plan without the given filenames.'''
        return USBSyncPlan([c for c in self.files_to_copy if c.filename not in filenames], self.usb_root)

@dataclass(frozen=True)
class ManifestEntry:
    '''Source file state at the time it was last copied to the drive.'''
    size: int
    modified: float

@dataclass
class USBManifest:
    '''Filename to the source state of the last copy made by execute().'''
    entries: dict[str, ManifestEntry] = field(default_factory=dict)

    def is_current(self, filename: str, size: int, modified: float) -> bool:
        entry = self.entries.get(filename)
        if entry is None:
            return False
        return entry.size == size and abs(entry.modified - modified) < constants.MTIME_TOLERANCE

    def merge(self, other: 'USBManifest') -> None:
        self.entries.update(other.entries)

    def to_dict(self) -> dict[str, Any]:
        return {name: {'size': e.size, 'modified': e.modified} for name, e in sorted(self.entries.items())}

    @staticmethod
    def load(path: str) -> 'USBManifest':
        '''Loads the manifest at `path`, or an empty manifest if there is no file.'''
        if not os.path.exists(path):
            return USBManifest()
        with open(path, 'r', encoding='utf-8') as file:
            data = json.load(file)
        return USBManifest({name: ManifestEntry(int(e['size']), float(e['modified'])) for name, e in data.items()})

    def save(self, path: str) -> None:
        with open(path, 'w', encoding='utf-8') as file:
            json.dump(self.to_dict(), file, indent=2)

# Classes
class Namespace(argparse.Namespace):
    '''Command-line arguments for usb module.'''

    # Required
    function: str

    # Optional (alphabetical)
    collection: str
    compare_mtime: bool
    drive: str
    dry_run: bool
    playlist: list[str]

    # Function constants
    FUNCTION_PLAN = 'plan'
    FUNCTION_COPY = 'copy'

    FUNCTIONS = {FUNCTION_PLAN, FUNCTION_COPY}

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
    parser.add_argument('--compare-mtime', '-t', action='store_true',
                       help='Also copy files whose modification time differs by more than a second')
    parser.add_argument('--drive', '-u', type=str,
                       help='Root of the removable drive')
    parser.add_argument('--dry-run', '-d', action='store_true',
                       help='Log the planned copies without copying')
    parser.add_argument('--playlist', '-p', type=str, action='append', default=[],
                       help="Slash-separated playlist path to include (e.g. 'House/Deep House'). Repeatable, defaults to all playlists")

    # Parse into Namespace
    args = parser.parse_args(argv, namespace=Namespace())

    # Normalize paths (only if not None)
    common.normalize_arg_paths(args, ['collection', 'drive'])

    # Validate function
    if args.function not in valid_functions:
        parser.error(f"invalid function '{args.function}'\n"
                    f"expect one of: {', '.join(sorted(valid_functions))}")

    # Function-specific validation
    if not args.collection:
        parser.error(f"'{args.function}' requires --collection")
    if not args.drive:
        parser.error(f"'{args.function}' requires --drive")
    if not os.path.isdir(args.drive):
        parser.error(f"--drive '{args.drive}' is not a directory")

    return args

# Helper functions
def search_root(usb_root: str) -> str:
    '''Returns the drive's Contents directory if it exists, otherwise the drive root.'''
    contents = os.path.join(usb_root, constants.USB_CONTENTS_DIR)
    return contents if os.path.isdir(contents) else usb_root

def build_file_index(root: str) -> dict[str, str]:
    '''Maps each filename under `root` to its path, searching all subdirectories.
    The first path found for a filename is kept.

    Raises:
        OSError: `root` can't be listed.
    '''
    def raise_error(error: OSError) -> None:
        raise error

    index: dict[str, str] = {}
    for working_dir, directories, filenames in os.walk(root, onerror=raise_error):
        directories.sort()
        for name in sorted(filenames):
            path = os.path.join(working_dir, name)
            if name in index:
                logging.warning(f"duplicate drive filename '{name}': keeping '{index[name]}', ignoring '{path}'")
                continue
            if os.path.isfile(path):
                index[name] = path
    return index

def is_changed(source: str, destination: str, compare_mtime: bool = False) -> bool:
    '''Compares a source file with its drive copy by size, and optionally by modification time.'''
    source_stat = os.stat(source)
    destination_stat = os.stat(destination)
    if source_stat.st_size != destination_stat.st_size:
        return True
    if compare_mtime:
        return abs(source_stat.st_mtime - destination_stat.st_mtime) > constants.MTIME_TOLERANCE
    return False

# Primary functions
def plan(tracks: list[Track],
         usb_root: str,
         compare_mtime: bool = False,
         manifest: USBManifest | None = None) -> USBSyncPlan:
    '''Plans copies for tracks whose file already exists on the drive and differs from the source.

    Args:
        tracks: Collection tracks to consider
        usb_root: Root of the removable drive
        compare_mtime: Also treat a modification time difference over one second as a change
        manifest: Source state recorded by previous copies, matching entries are skipped

    Raises:
        OSError: The drive or a file can't be read.
    '''
    index = build_file_index(search_root(usb_root))
    logging.debug(f"indexed {len(index)} files on drive '{usb_root}'")

    copies: list[FileCopy] = []
    for track in tracks:
        source = track.path
        filename = os.path.basename(source)

        if not os.path.exists(source):
            logging.info(f"skip missing source: '{source}'")
            continue

        destination = index.get(filename)
        if destination is None:
            logging.debug(f"skip track not on drive: '{filename}'")
            continue

        if manifest is not None:
            stat = os.stat(source)
            if manifest.is_current(filename, stat.st_size, stat.st_mtime):
                logging.debug(f"skip unchanged since last copy: '{filename}'")
                continue

        if is_changed(source, destination, compare_mtime=compare_mtime):
            copies.append(FileCopy(source=source, destination=destination, filename=filename))

    logging.info(f"planned {len(copies)} of {len(tracks)} tracks for drive '{usb_root}'")
    return USBSyncPlan(files_to_copy=copies, usb_root=usb_root)

def execute(sync_plan: USBSyncPlan, progress: Callable[[int, int, str], None] | None = None) -> USBManifest:
    '''Overwrites each planned destination with its source.

    Args:
        sync_plan: The copies to make
        progress: Called with (completed, total, filename) after each copy

    Returns:
        Manifest entries for the copied files.

    Raises:
        OSError: A copy fails, remaining copies are not attempted.
    '''
    manifest = USBManifest()
    total = len(sync_plan.files_to_copy)
    for index, copy in enumerate(sync_plan.files_to_copy):
        if os.path.exists(copy.destination):
            os.remove(copy.destination)
        shutil.copy2(copy.source, copy.destination)

        stat = os.stat(copy.source)
        manifest.entries[copy.filename] = ManifestEntry(size=stat.st_size, modified=stat.st_mtime)
        logging.info(f"copied '{copy.source}' -> '{copy.destination}' ({index + 1}/{total})")
        if progress:
            progress(index + 1, total, copy.filename)
    return manifest

def select_tracks(collection_path: str, playlist_paths: list[str]) -> list[Track]:
    '''Loads the collection and returns the tracks of the given playlists, or of every playlist if none are given.'''
    library = collection_io.load_collection(collection_path)
    available = library.playlist_paths()
    selected = set(playlist_paths) if playlist_paths else set(available)
    for path in selected.difference(available):
        logging.warning(f"playlist not found in collection: '{path}'")
    return library.tracks_for_playlists(selected)

def main(argv: list[str]) -> None:
    common.configure_log_module(__file__, level=logging.DEBUG)
    script_args = parse_args(Namespace.FUNCTIONS, argv[1:])

    logging.info(f"running function '{script_args.function}'")
    tracks = select_tracks(script_args.collection, script_args.playlist)
    manifest_path = os.path.join(script_args.drive, config.MANIFEST_NAME)
    manifest = USBManifest.load(manifest_path)
    sync_plan = plan(tracks, script_args.drive, compare_mtime=script_args.compare_mtime, manifest=manifest)

    if not sync_plan.files_to_copy:
        print('No files to copy - drive is up to date!')
        return

    print(f'{len(sync_plan.files_to_copy)} files to copy:')
    for copy in sync_plan.files_to_copy:
        print(f'  {copy.filename} -> {copy.destination}')

    if script_args.function == Namespace.FUNCTION_COPY:
        if script_args.dry_run:
            common.log_dry_run('copy', f"{len(sync_plan.files_to_copy)} files to '{script_args.drive}'")
            return
        report: Callable[[int, int, str], None] = lambda done, total, name: print(f'[{done}/{total}] {name}')
        manifest.merge(execute(sync_plan, progress=report))
        manifest.save(manifest_path)
        print('Drive sync complete!')

if __name__ == '__main__':
    main(sys.argv)
