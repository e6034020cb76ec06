'''
Runtime configuration loaded from environment variables with defaults.

Import this module instead of constants.py for any configurable value.
The source folder and collection paths normally come from the settings file
owned by the desktop app; export them here to run the command line tools:

    export REKORDBOXER_SOURCE_PATH=/Users/dj/Music/Library
    export REKORDBOXER_COLLECTION_PATH=/Users/dj/Music/rekordbox.xml
    export REKORDBOXER_STATE_DIR=/tmp/rekordboxer_test/state
    export REKORDBOXER_LOG_DIR=/tmp/rekordboxer_test/logs
'''

import os
from pathlib import Path

# Project paths
PROJECT_ROOT = Path(os.getenv('REKORDBOXER_PROJECT_ROOT', str(Path(__file__).parent.parent.parent)))
STATE_DIR    = Path(os.getenv('REKORDBOXER_STATE_DIR', str(PROJECT_ROOT / 'state')))
LOG_DIR      = Path(os.getenv('REKORDBOXER_LOG_DIR', str(PROJECT_ROOT / 'logs')))

# Settings collaborator: source folder and collection file
SOURCE_PATH     = os.getenv('REKORDBOXER_SOURCE_PATH')
COLLECTION_PATH = os.getenv('REKORDBOXER_COLLECTION_PATH')

# State file paths
ID_MAP_PATH = os.getenv('REKORDBOXER_ID_MAP_PATH', str(STATE_DIR / 'trackids.json'))

# Removable drive
MANIFEST_NAME = os.getenv('REKORDBOXER_MANIFEST_NAME', '.rekordboxer-manifest.json')
