import os
import unittest

from pathlib import Path, PurePosixPath
from tempfile import TemporaryDirectory

from atmfjstc.lib.device_tree_fs.paths import PathKind, concat_path, check_path
from atmfjstc.lib.device_tree_fs.store import MemoryDeviceTreeStore
from atmfjstc.lib.device_tree_fs.errors import InvalidBasePathError


class ConcatPathTest(unittest.TestCase):
    def test_inserts_separator(self):
        self.assertEqual(concat_path('/proc/device-tree', 'cpus'), '/proc/device-tree/cpus')

    def test_base_ends_with_separator(self):
        self.assertEqual(concat_path('/proc/device-tree/', 'cpus'), '/proc/device-tree/cpus')

    def test_path_starts_with_separator(self):
        self.assertEqual(concat_path('/proc/device-tree', '/cpus'), '/proc/device-tree/cpus')

    def test_no_further_normalization(self):
        self.assertEqual(concat_path('/a/', '/b'), '/a//b')

    def test_empty_path(self):
        self.assertEqual(concat_path('/a', ''), '/a/')

    def test_no_path(self):
        self.assertEqual(concat_path('/a'), '/a')

    def test_path_like(self):
        self.assertEqual(concat_path(PurePosixPath('/a'), PurePosixPath('b')), '/a/b')

    def test_missing_base(self):
        with self.assertRaises(InvalidBasePathError):
            concat_path(None, 'cpus')

    def test_empty_base(self):
        with self.assertRaises(ValueError):
            concat_path('', 'cpus')


class CheckPathTest(unittest.TestCase):
    def setUp(self):
        self.store = MemoryDeviceTreeStore({
            'cpus': {'cpu@0': {}},
            'model': b'Acme Board\x00',
            'weird': None,
        })

    def test_node(self):
        self.assertEqual(check_path('/', 'cpus', self.store), PathKind.NODE)
        self.assertEqual(check_path('/cpus/cpu@0', store=self.store), PathKind.NODE)

    def test_property(self):
        self.assertEqual(check_path('/', 'model', self.store), PathKind.PROPERTY)

    def test_other(self):
        with self.assertLogs('atmfjstc.lib.device_tree_fs', level='WARNING') as logs:
            self.assertEqual(check_path('/', 'weird', self.store), PathKind.INVALID)

        self.assertEqual(len(logs.output), 1)
        self.assertIn('/weird', logs.output[0])

    def test_missing(self):
        with self.assertLogs('atmfjstc.lib.device_tree_fs', level='WARNING') as logs:
            self.assertEqual(check_path('/', 'nope', self.store), PathKind.INVALID)

        self.assertIn('/nope', logs.output[0])

    def test_empty_base(self):
        with self.assertRaises(InvalidBasePathError):
            check_path('', 'cpus', self.store)


class CheckLocalPathTest(unittest.TestCase):
    def test_local_filesystem(self):
        with TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            (root / 'cpus').mkdir()
            (root / 'model').write_bytes(b'')

            self.assertEqual(check_path(temp_dir, 'cpus'), PathKind.NODE)
            self.assertEqual(check_path(root, 'model'), PathKind.PROPERTY)

            with self.assertLogs('atmfjstc.lib.device_tree_fs', level='WARNING'):
                self.assertEqual(check_path(temp_dir, 'nope'), PathKind.INVALID)

            if hasattr(os, 'mkfifo'):
                os.mkfifo(root / 'fifo')

                with self.assertLogs('atmfjstc.lib.device_tree_fs', level='WARNING'):
                    self.assertEqual(check_path(temp_dir, 'fifo'), PathKind.INVALID)
