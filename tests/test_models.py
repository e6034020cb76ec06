import os
import unittest

from rekordboxer import models, constants
from rekordboxer.models import Library, Track, Node, NodeType, PositionMark, PositionMarkType

class TestRatingConversion(unittest.TestCase):
    def test_rating_to_stars(self) -> None:
        '''Tests that each rating step maps to its star count.'''
        for rating, stars in [(0, 0), (51, 1), (102, 2), (153, 3), (204, 4), (255, 5)]:
            self.assertEqual(Track.rating_to_stars(rating), stars, f"rating {rating}")

    def test_stars_to_rating(self) -> None:
        '''Tests that each star count maps to its rating step.'''
        for stars, rating in [(0, 0), (1, 51), (2, 102), (3, 153), (4, 204), (5, 255)]:
            self.assertEqual(Track.stars_to_rating(stars), rating, f"stars {stars}")

    def test_stars_property(self) -> None:
        self.assertEqual(Track(track_id=1, rating=204).stars, 4)

class TestLocation(unittest.TestCase):
    def test_encode_escapes_spaces(self) -> None:
        '''Tests that the path is prefixed and percent-escaped.'''
        actual = models.encode_location('/Users/dj/Music/Summer Vibes.mp3')
        self.assertEqual(actual, 'file://localhost/Users/dj/Music/Summer%20Vibes.mp3')

    def test_encode_keeps_path_safe_characters(self) -> None:
        '''Tests that path separators and sub-delimiters are not escaped.'''
        actual = models.encode_location("/Music/Artist & Co/Track (Remix)'s.mp3")
        self.assertEqual(actual, "file://localhost/Music/Artist%20&%20Co/Track%20(Remix)'s.mp3")

    def test_decode_reverses_encode(self) -> None:
        '''Tests that decoding an encoded path yields the original path.'''
        path = '/Users/dj/Música/Björk #1 [live]?.aiff'
        self.assertEqual(models.decode_location(models.encode_location(path)), path)

    def test_undecodable_filename_round_trips(self) -> None:
        '''Tests that a filename which isn't valid UTF-8 is escaped from its raw bytes and decoded back.'''
        path = os.fsdecode(b'/music/caf\xe9.mp3')

        actual = models.encode_location(path)

        self.assertEqual(actual, 'file://localhost/music/caf%E9.mp3')
        self.assertEqual(models.decode_location(actual), path)

    def test_xml_safe_text(self) -> None:
        self.assertEqual(models.xml_safe_text('Summer Vibes\t(Edit)'), 'Summer Vibes\t(Edit)')
        self.assertEqual(models.xml_safe_text('intro\x01\x1f'), f"intro{constants.REPLACEMENT_CHAR}{constants.REPLACEMENT_CHAR}")

    def test_track_path(self) -> None:
        track = Track(track_id=1, location='file://localhost/Users/dj/Music/Summer%20Vibes.mp3')
        self.assertEqual(track.path, '/Users/dj/Music/Summer Vibes.mp3')
        self.assertEqual(track.filename, 'Summer Vibes.mp3')

class TestPositionMark(unittest.TestCase):
    def test_memory_cue(self) -> None:
        mark = PositionMark(name='', type=PositionMarkType.CUE, start=0.5, num=-1)
        self.assertTrue(mark.is_memory_cue)
        self.assertFalse(mark.is_hot_cue)
        self.assertFalse(mark.is_loop)

    def test_hot_cue(self) -> None:
        mark = PositionMark(name='Drop', type=PositionMarkType.CUE, start=60.5, num=0, red=40, green=226, blue=20)
        self.assertTrue(mark.is_hot_cue)
        self.assertFalse(mark.is_memory_cue)
        self.assertEqual(mark.color, (40, 226, 20))

    def test_loop(self) -> None:
        mark = PositionMark(name='', type=PositionMarkType.LOOP, start=112.52, end=120.139, num=1)
        self.assertTrue(mark.is_loop)
        self.assertIsNone(mark.color)

class TestNode(unittest.TestCase):
    def test_node_types(self) -> None:
        folder = Node.folder('House', [Node.playlist('Deep', [1, 2])])
        self.assertTrue(folder.is_folder)
        self.assertEqual(folder.type, NodeType.FOLDER)
        self.assertEqual(folder.track_keys, [])
        self.assertTrue(folder.children[0].is_playlist)
        self.assertEqual(folder.children[0].track_keys, [1, 2])

    def test_library_default_root(self) -> None:
        library = Library()
        self.assertTrue(library.root.is_folder)
        self.assertEqual(library.root.name, 'ROOT')
        self.assertEqual(library.tracks, {})

class TestPlaylistSelection(unittest.TestCase):
    def setUp(self) -> None:
        self.library = Library()
        for track_id in (1, 2, 3):
            self.library.tracks[track_id] = Track(track_id=track_id, name=f"track{track_id}")
        self.library.root = Node.folder('ROOT', [
            Node.playlist('House', [1, 2]),
            Node.folder('Techno', [
                Node.playlist('Techno', [3, 1]),
                Node.playlist('Dub', [99]),
            ]),
        ])

    def test_playlist_paths(self) -> None:
        '''Tests that nested playlists are listed by slash-joined path in tree order.'''
        self.assertEqual(self.library.playlist_paths(), ['House', 'Techno/Techno', 'Techno/Dub'])

    def test_tracks_for_playlists_deduplicates(self) -> None:
        '''Tests that a track in several selected playlists is returned once, in tree order.'''
        actual = self.library.tracks_for_playlists({'House', 'Techno/Techno'})
        self.assertEqual([t.track_id for t in actual], [1, 2, 3])

    def test_tracks_for_playlists_skips_dangling_keys(self) -> None:
        '''Tests that keys with no matching track resolve to nothing.'''
        self.assertEqual(self.library.tracks_for_playlists({'Techno/Dub'}), [])

    def test_tracks_for_unselected_playlists(self) -> None:
        self.assertEqual(self.library.tracks_for_playlists(set()), [])
