'''
Shared test fixtures for the rekordboxer test suite.

Import specific names into each test file rather than using wildcard imports.
'''

import os

# Common mock paths shared across multiple test files
MOCK_INPUT_DIR  = '/mock/input'
MOCK_OUTPUT_DIR = '/mock/output'

# XML fixture: a collection with two tracks and a nested playlist tree
COLLECTION_XML = '''
<?xml version="1.0" encoding="UTF-8"?>

<DJ_PLAYLISTS Version="1.0.0">
    <PRODUCT Name="rekordbox" Version="6.7.4" Company="AlphaTheta"/>
    <COLLECTION Entries="2">
        <TRACK TrackID="1" Name="Summer Vibes" Artist="DJ Example" Composer="" Album="Sunshine"
               Grouping="" Genre="House" Kind="MP3 File" Size="5242880" TotalTime="238"
               DiscNumber="0" TrackNumber="1" Year="2023" AverageBpm="126.00"
               DateAdded="2023-06-15" DateModified="" BitRate="320" SampleRate="44100"
               Comments="" PlayCount="5" LastPlayed="" Rating="255"
               Location="file://localhost/Users/dj/Music/Summer%20Vibes.mp3"
               Remixer="" Tonality="Am" Label="Example Records" Mix="" Colour="0xFF0000"
               MyTag="custom">
            <TEMPO Inizio="0.520" Bpm="126.00" Metro="4/4" Battito="1"/>
            <POSITION_MARK Name="" Type="0" Start="0.520" Num="-1"/>
            <POSITION_MARK Name="Drop" Type="0" Start="60.520" Num="0" Red="40" Green="226" Blue="20"/>
            <POSITION_MARK Name="" Type="4" Start="112.520" End="120.139" Num="1"/>
        </TRACK>
        <TRACK TrackID="2" Name="Night Drive" Artist="Synth Master" Genre="Techno"
               Kind="FLAC File" Size="31457280" TotalTime="412" AverageBpm="132.50"
               DateAdded="2023-07-01" SampleRate="48000" Rating="153"
               Location="file://localhost/Users/dj/Music/Techno/Night%20Drive.flac" Tonality="Fm"/>
    </COLLECTION>
    <PLAYLISTS>
        <NODE Type="0" Name="ROOT" Count="2">
            <NODE Name="House" Type="1" KeyType="0" Entries="1">
                <TRACK Key="1"/>
            </NODE>
            <NODE Type="0" Name="Warehouse" Count="1">
                <NODE Name="Techno" Type="1" KeyType="0" Entries="2">
                    <TRACK Key="2"/>
                    <TRACK Key="1"/>
                </NODE>
            </NODE>
        </NODE>
    </PLAYLISTS>
</DJ_PLAYLISTS>
'''.strip()

# XML fixture: empty DJ_PLAYLISTS document
XML_BASE = '''
<?xml version="1.0" encoding="UTF-8"?>

<DJ_PLAYLISTS Version="1.0.0">
    <PRODUCT Name="rekordbox" Version="6.8.5" Company="AlphaTheta"/>
    <COLLECTION Entries="0">

    </COLLECTION>
    <PLAYLISTS>
        <NODE Type="0" Name="ROOT" Count="0"/>
    </PLAYLISTS>
</DJ_PLAYLISTS>
'''.strip()


def create_file(path: str, content: bytes = b'audio') -> str:
    '''Creates a file with the given content, including parent directories. Returns the path.'''
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, 'wb') as file:
        file.write(content)
    return path
