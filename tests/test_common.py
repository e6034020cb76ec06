import unittest
import logging
import os
import argparse
from unittest.mock import MagicMock, patch

from rekordboxer import common, config

class TestFilenameNoExt(unittest.TestCase):
    def test_success(self) -> None:
        # call test target
        actual = common.filename_no_ext('/test/path/file.foo')
        self.assertEqual(actual, 'file')

        actual = common.filename_no_ext(__file__)
        self.assertEqual(actual, 'test_common')

class TestConfigureLog(unittest.TestCase):
    def setUp(self) -> None:
        # store the existing log handlers before the configure log function manipulates them
        root = logging.getLogger()
        self._saved_handlers = root.handlers[:]

    def tearDown(self) -> None:
        # restore the orignal log handlers
        root = logging.getLogger()
        root.handlers = self._saved_handlers

    @patch('logging.basicConfig')
    @patch('os.path.exists')
    @patch('os.makedirs')
    def test_configure_log_default(self,
                                   mock_makedirs: MagicMock,
                                   mock_path_exists: MagicMock,
                                   mock_basic_config: MagicMock) -> None:
        '''Tests that a default log configuration is created in the configured log directory.'''
        # call test target
        common.configure_log('test')

        # assert expectation
        LOG_PATH = f"{config.LOG_DIR}{os.sep}test.log"
        self.assertEqual(mock_basic_config.call_args.kwargs['filename'], LOG_PATH)
        self.assertEqual(mock_basic_config.call_args.kwargs['level'], logging.DEBUG)

    @patch('logging.basicConfig')
    @patch('os.path.exists')
    @patch('os.makedirs')
    def test_configure_log_custom_args(self,
                                       mock_makedirs: MagicMock,
                                       mock_path_exists: MagicMock,
                                       mock_basic_config: MagicMock) -> None:
        '''Tests that a custom log configuration is respected.'''
        # call test target
        common.configure_log('test', level=logging.INFO, path='/mock/logs')

        # assert expectation
        self.assertEqual(mock_basic_config.call_args.kwargs['filename'], f"/mock/logs{os.sep}test.log")
        self.assertEqual(mock_basic_config.call_args.kwargs['level'], logging.INFO)

    @patch('logging.basicConfig')
    @patch('os.path.exists')
    @patch('os.makedirs')
    def test_configure_log_creates_directory(self,
                                             mock_makedirs: MagicMock,
                                             mock_path_exists: MagicMock,
                                             mock_basic_config: MagicMock) -> None:
        '''Tests that a missing log directory is created.'''
        # Set up mocks
        mock_path_exists.return_value = False

        # call test target
        common.configure_log('test', path='/mock/logs')

        # assert expectation
        mock_makedirs.assert_called_once_with('/mock/logs', exist_ok=True)

    @patch('rekordboxer.common.configure_log')
    def test_configure_log_module(self, mock_configure_log: MagicMock) -> None:
        '''Tests that the module file name is used as the log name.'''
        common.configure_log_module('/src/rekordboxer/sync.py', level=logging.INFO)

        mock_configure_log.assert_called_once_with('sync', level=logging.INFO)

class TestNormalizeArgPaths(unittest.TestCase):
    def test_normalizes_set_paths(self) -> None:
        '''Tests that set path arguments are normalized and unset arguments are left alone.'''
        args = argparse.Namespace(source='/mock/input/../music/', collection=None)

        common.normalize_arg_paths(args, ['source', 'collection', 'missing'])

        self.assertEqual(args.source, os.path.normpath('/mock/music'))
        self.assertIsNone(args.collection)
        self.assertFalse(hasattr(args, 'missing'))

class TestLogDryRun(unittest.TestCase):
    def test_log_dry_run(self) -> None:
        '''Test dry-run logging helper.'''
        with self.assertLogs(level='INFO') as log_context:
            common.log_dry_run('write collection', '/mock/output/rekordbox.xml')

        self.assertEqual(len(log_context.output), 1)
        self.assertIn('[DRY-RUN]', log_context.output[0])
        self.assertIn('Would write collection', log_context.output[0])
        self.assertIn('/mock/output/rekordbox.xml', log_context.output[0])
