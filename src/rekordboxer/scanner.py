'''
# Summary
Scans a music folder into a tree of folders holding audio files.

Each immediate subdirectory of the root becomes a top-level folder, and audio files
found directly in the root are grouped into a synthetic folder named after the root.
Folders whose subtree holds no audio files are pruned from the result.

# Assumptions
* The folder tree is finite and acyclic, symlink loops are not detected.
'''

import os
import logging
from dataclasses import dataclass
from typing import Callable, Iterator

from . import constants

# Classes
@dataclass(frozen=True)
class ScannedFile:
    '''Snapshot of one audio file at scan time.'''
    path: str
    size: int
    modified: float

    @property
    def name(self) -> str:
        return os.path.basename(self.path)

    @property
    def extension(self) -> str:
        return os.path.splitext(self.path)[1].lower()

@dataclass(frozen=True)
class ScannedFolder:
    '''A folder with its direct audio files and non-empty subfolders, each sorted by name.'''
    name: str
    path: str
    files: tuple[ScannedFile, ...] = ()
    children: tuple['ScannedFolder', ...] = ()

    @property
    def all_files(self) -> list[ScannedFile]:
        '''Direct files followed by each child's files, depth-first.'''
        return list(self.iter_files())

    def iter_files(self) -> Iterator[ScannedFile]:
        yield from self.files
        for child in self.children:
            yield from child.iter_files()

    @property
    def is_empty(self) -> bool:
        return not self.files and not self.children

# Helper functions
def is_audio_file(path: str) -> bool:
    '''Checks the file extension against the audio allow-list, ignoring case.'''
    return os.path.splitext(path)[1].lower() in constants.EXTENSIONS

def _snapshot(path: str) -> ScannedFile:
    stat = os.stat(path)
    return ScannedFile(path=path, size=stat.st_size, modified=stat.st_mtime)

def _list_entries(directory: str) -> tuple[list[str], list[str]]:
    '''Splits a directory's entries into sorted (audio file paths, subdirectory paths).'''
    audio_paths: list[str] = []
    subdirs: list[str] = []
    for name in sorted(os.listdir(directory)):
        path = os.path.join(directory, name)
        if os.path.isdir(path):
            subdirs.append(path)
        elif os.path.isfile(path) and is_audio_file(name):
            audio_paths.append(path)
    return (audio_paths, subdirs)

def _scan_folder(directory: str) -> ScannedFolder | None:
    audio_paths, subdirs = _list_entries(directory)
    files = tuple(_snapshot(path) for path in audio_paths)

    children: list[ScannedFolder] = []
    for subdir in subdirs:
        child = _scan_folder(subdir)
        if child:
            children.append(child)

    if not files and not children:
        logging.debug(f"prune empty folder: '{directory}'")
        return None
    return ScannedFolder(name=os.path.basename(directory), path=directory, files=files, children=tuple(children))

# Primary functions
def scan(root: str) -> list[ScannedFolder]:
    '''Scans the root directory into a list of top-level folders.

    Args:
        root: The music folder to scan

    Returns:
        The synthetic root folder (if the root holds audio files directly) followed by
        each non-empty subdirectory, sorted by name.

    Raises:
        OSError: The root or one of its subdirectories can't be listed.
    '''
    root = os.path.normpath(root)
    audio_paths, subdirs = _list_entries(root)
    folders: list[ScannedFolder] = []

    if audio_paths:
        files = tuple(_snapshot(path) for path in audio_paths)
        folders.append(ScannedFolder(name=os.path.basename(root), path=root, files=files))

    for subdir in subdirs:
        folder = _scan_folder(subdir)
        if folder:
            folders.append(folder)

    logging.info(f"scanned '{root}': {len(folders)} folders, {count_files(folders)} audio files")
    return folders

def filter_folders(folders: list[ScannedFolder], predicate: Callable[[ScannedFile], bool]) -> list[ScannedFolder]:
    '''Keeps only the files accepted by `predicate`, pruning folders left empty.

    Use this to apply a user selection to a scan before diffing.

    Example:
        >>> filter_folders(folders, lambda f: f.path not in excluded_paths)
    '''
    filtered: list[ScannedFolder] = []
    for folder in folders:
        pruned = _filter_folder(folder, predicate)
        if pruned:
            filtered.append(pruned)
    return filtered

def _filter_folder(folder: ScannedFolder, predicate: Callable[[ScannedFile], bool]) -> ScannedFolder | None:
    files = tuple(f for f in folder.files if predicate(f))
    children = tuple(filter_folders(list(folder.children), predicate))
    if not files and not children:
        return None
    return ScannedFolder(name=folder.name, path=folder.path, files=files, children=children)

def count_files(folders: list[ScannedFolder]) -> int:
    return sum(len(folder.all_files) for folder in folders)
