'''
Stable TrackID assignment for file paths.

The map is persisted separately from the XML collection so a track keeps its ID
across collection rewrites, as long as its path doesn't change.
'''

import os
import json
import logging
from typing import Any

from .models import Library

# Keys in the persisted document
KEY_NEXT_ID = 'next_id'
KEY_PATHS   = 'paths'

class TrackIDMap:
    '''Maps absolute file paths to TrackIDs. Every issued ID is below `next_id`.'''

    def __init__(self, paths: dict[str, int] | None = None, next_id: int = 1) -> None:
        self._paths: dict[str, int] = dict(paths or {})
        self.next_id = max([next_id, *(track_id + 1 for track_id in self._paths.values())])

    def __contains__(self, path: str) -> bool:
        return path in self._paths

    def __len__(self) -> int:
        return len(self._paths)

    def get_or_assign(self, path: str) -> int:
        '''Returns the ID for `path`, issuing the next ID if the path is unmapped.'''
        existing = self._paths.get(path)
        if existing is not None:
            return existing
        track_id = self.next_id
        self._paths[path] = track_id
        self.next_id += 1
        logging.debug(f"assigned TrackID {track_id} to '{path}'")
        return track_id

    def assign(self, path: str, track_id: int) -> None:
        '''Maps `path` to a known ID, advancing `next_id` past it.'''
        self._paths[path] = track_id
        if track_id >= self.next_id:
            self.next_id = track_id + 1

    def track_id(self, path: str) -> int | None:
        return self._paths.get(path)

    def remove(self, path: str) -> None:
        self._paths.pop(path, None)

    def to_dict(self) -> dict[str, Any]:
        return {
            KEY_NEXT_ID : self.next_id,
            KEY_PATHS   : dict(self._paths)
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> 'TrackIDMap':
        paths = {str(path): int(track_id) for path, track_id in data.get(KEY_PATHS, {}).items()}
        return TrackIDMap(paths, int(data.get(KEY_NEXT_ID, 1)))

    @staticmethod
    def from_library(library: Library) -> 'TrackIDMap':
        '''Seeds a map with the IDs already used by the tracks in `library`.'''
        id_map = TrackIDMap()
        for track in library.tracks.values():
            id_map.assign(track.path, track.track_id)
        return id_map

    def adopt(self, library: Library) -> int:
        '''Maps any library track path that isn't mapped yet to its existing TrackID.
        Returns the number of paths adopted.
        '''
        adopted = 0
        for track in library.tracks.values():
            if track.path not in self._paths:
                self.assign(track.path, track.track_id)
                adopted += 1
        if adopted:
            logging.info(f"adopted {adopted} TrackIDs from the collection")
        return adopted

    # Persistence
    @staticmethod
    def load(path: str) -> 'TrackIDMap':
        '''Loads a map from the JSON file at `path`.

        Raises:
            OSError: The file can't be read.
            ValueError: The file isn't valid JSON.
        '''
        with open(path, 'r', encoding='utf-8') as file:
            return TrackIDMap.from_dict(json.load(file))

    def save(self, path: str) -> None:
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as file:
            json.dump(self.to_dict(), file, indent=2)
        logging.debug(f"saved {len(self)} TrackIDs to '{path}'")
