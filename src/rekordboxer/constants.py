# Rekordbox
REKORDBOX_ROOT = 'file://localhost'
URL_SAFE_CHARS = "/!$&'()*+,;=:@~"
ROOT_NODE_NAME = 'ROOT'

# written in place of characters that XML can't hold
REPLACEMENT_CHAR = '\U0000fffd'

# Placeholder product info for a new collection
PRODUCT_NAME    = 'rekordbox'
PRODUCT_COMPANY = 'AlphaTheta'
DOCUMENT_VERSION = '1.0.0'

## xml references
TAG_DJ_PLAYLISTS  = 'DJ_PLAYLISTS'
TAG_PRODUCT       = 'PRODUCT'
TAG_COLLECTION    = 'COLLECTION'
TAG_PLAYLISTS     = 'PLAYLISTS'
TAG_TRACK         = 'TRACK'
TAG_TEMPO         = 'TEMPO'
TAG_POSITION_MARK = 'POSITION_MARK'
TAG_NODE          = 'NODE'

## document attributes
ATTR_VERSION  = 'Version'
ATTR_NAME     = 'Name'
ATTR_COMPANY  = 'Company'
ATTR_ENTRIES  = 'Entries'
ATTR_COUNT    = 'Count'
ATTR_TYPE     = 'Type'
ATTR_KEY_TYPE = 'KeyType'

## track attributes
ATTR_TRACK_ID      = 'TrackID'
ATTR_TITLE         = 'Name'
ATTR_ARTIST        = 'Artist'
ATTR_COMPOSER      = 'Composer'
ATTR_ALBUM         = 'Album'
ATTR_GROUPING      = 'Grouping'
ATTR_GENRE         = 'Genre'
ATTR_KIND          = 'Kind'
ATTR_SIZE          = 'Size'
ATTR_TOTAL_TIME    = 'TotalTime'
ATTR_DISC_NUMBER   = 'DiscNumber'
ATTR_TRACK_NUMBER  = 'TrackNumber'
ATTR_YEAR          = 'Year'
ATTR_AVG_BPM       = 'AverageBpm'
ATTR_DATE_ADDED    = 'DateAdded'
ATTR_DATE_MODIFIED = 'DateModified'
ATTR_BIT_RATE      = 'BitRate'
ATTR_SAMPLE_RATE   = 'SampleRate'
ATTR_COMMENTS      = 'Comments'
ATTR_PLAY_COUNT    = 'PlayCount'
ATTR_LAST_PLAYED   = 'LastPlayed'
ATTR_RATING        = 'Rating'
ATTR_LOCATION      = 'Location'
ATTR_REMIXER       = 'Remixer'
ATTR_KEY           = 'Tonality'
ATTR_LABEL         = 'Label'
ATTR_MIX           = 'Mix'
ATTR_COLOUR        = 'Colour'

## playlist entry attributes
ATTR_TRACK_KEY = 'Key'

## tempo attributes
ATTR_INIZIO  = 'Inizio'
ATTR_BPM     = 'Bpm'
ATTR_METRO   = 'Metro'
ATTR_BATTITO = 'Battito'

## position mark attributes
ATTR_START = 'Start'
ATTR_END   = 'End'
ATTR_NUM   = 'Num'
ATTR_RED   = 'Red'
ATTR_GREEN = 'Green'
ATTR_BLUE  = 'Blue'

# Rating: 0-255 in steps of 51 per star
RATING_STEP = 51
MAX_STARS   = 5

# Position mark slot for the memory cue
MEMORY_CUE_NUM = -1

# file information
EXTENSIONS = {'.mp3', '.wav', '.flac', '.aiff', '.aif', '.aac', '.m4a', '.ogg', '.alac'}

MAPPING_KIND = {
    '.mp3'  : 'MP3 File',
    '.wav'  : 'WAV File',
    '.flac' : 'FLAC File',
    '.aiff' : 'AIFF File',
    '.aif'  : 'AIFF File',
    '.aac'  : 'AAC File',
    '.m4a'  : 'AAC File',
    '.ogg'  : 'OGG File',
}
KIND_DEFAULT = 'Audio File'

# date format for DateAdded
DATE_ADDED_FORMAT = '%Y-%m-%d'

# removable drive
USB_CONTENTS_DIR = 'Contents'
MTIME_TOLERANCE  = 1.0
