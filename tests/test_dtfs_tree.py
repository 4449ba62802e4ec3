import io
import logging
import unittest

from contextlib import redirect_stdout, redirect_stderr
from pathlib import Path
from tempfile import TemporaryDirectory

from atmfjstc.lib.device_tree_fs.dtfs_tree import main, format_property
from atmfjstc.lib.device_tree_fs.properties import PropertyBuffer


class FormatPropertyTest(unittest.TestCase):
    def test_simple(self):
        self.assertEqual(format_property('/dma-coherent', None, 0), '| /dma-coherent')

    def test_strings(self):
        self.assertEqual(
            format_property('/compatible', b'acme,board\x00acme,soc\x00', 20),
            '| /compatible (2) = "acme,board", "acme,soc"'
        )

    def test_words(self):
        self.assertEqual(
            format_property('/reg', b'\x00\x00\x00\x01\xde\xad\xbe\xef', 8),
            '| /reg (2) = <0x00000001 0xDEADBEEF>'
        )

    def test_bytes(self):
        self.assertEqual(format_property('/blob', b'\x0a\xff\x10', 3), '| /blob (3) = [0aff10]')

    def test_property_buffer(self):
        with PropertyBuffer(b'\x0a\xff\x10\x00\x01') as data:
            self.assertEqual(format_property('/blob', data, len(data)), '| /blob (5) = [0aff100001]')


class MainTest(unittest.TestCase):
    def _run(self, argv):
        out = io.StringIO()
        err = io.StringIO()

        with redirect_stdout(out), redirect_stderr(err):
            status = main(argv)

        return status, out.getvalue(), err.getvalue()

    def test_usage(self):
        status, out, err = self._run(['-h'])

        self.assertEqual(status, 1)
        self.assertEqual(out, '')
        self.assertIn('Usage: dtfs-tree [-h] [base path]', err)

    def test_dump(self):
        with TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            (root / 'compatible').write_bytes(b'acme,board\x00acme,soc\x00')
            (root / 'cpus').mkdir()
            (root / 'cpus' / '#address-cells').write_bytes(b'\x00\x00\x00\x01')
            (root / 'cpus' / 'cpu@0').mkdir()
            (root / 'cpus' / 'cpu@0' / 'enable-method').write_bytes(b'')
            (root / 'blob').write_bytes(b'\x0a\xff\x10')
            (root / '.hidden').write_bytes(b'x\x00')

            status, out, err = self._run([temp_dir])

        self.assertEqual(status, 0)
        self.assertEqual(sorted(out.splitlines()), sorted([
            f'| {temp_dir}/compatible (2) = "acme,board", "acme,soc"',
            f'+ {temp_dir}/cpus',
            f'| {temp_dir}/cpus/#address-cells (1) = <0x00000001>',
            f'+ {temp_dir}/cpus/cpu@0',
            f'| {temp_dir}/cpus/cpu@0/enable-method',
            f'| {temp_dir}/blob (3) = [0aff10]',
        ]))

    def test_nodes_precede_their_children(self):
        with TemporaryDirectory() as temp_dir:
            (Path(temp_dir) / 'cpus').mkdir()
            (Path(temp_dir) / 'cpus' / 'reg').write_bytes(b'\x00\x00\x00\x00')

            status, out, err = self._run([temp_dir])

        self.assertEqual(out.splitlines(), [f'+ {temp_dir}/cpus', f'| {temp_dir}/cpus/reg (1) = <0x00000000>'])

    def test_missing_root(self):
        with TemporaryDirectory() as temp_dir:
            status, out, err = self._run([str(Path(temp_dir) / 'nope')])

        self.assertEqual(status, 1)
        self.assertEqual(out, '')
        self.assertIn('nope', err)

    def test_empty_base(self):
        status, out, err = self._run([''])

        self.assertEqual(status, 1)

    def test_extra_arguments_ignored(self):
        with TemporaryDirectory() as temp_dir:
            (Path(temp_dir) / 'model').write_bytes(b'Acme\x00')

            status, out, err = self._run([temp_dir, 'extra', '-h'])

        self.assertEqual(status, 0)
        self.assertEqual(out.splitlines(), [f'| {temp_dir}/model (1) = "Acme"'])

    def test_unknown_option_is_a_base_path(self):
        status, out, err = self._run(['-x'])

        self.assertEqual(status, 1)
        self.assertEqual(out, '')
        self.assertIn('-x', err)

    def test_root_log_level_restored(self):
        root_logger = logging.getLogger()
        saved_level = root_logger.level
        root_logger.setLevel(logging.DEBUG)

        try:
            with TemporaryDirectory() as temp_dir:
                self._run([temp_dir])

            self.assertEqual(root_logger.level, logging.DEBUG)
        finally:
            root_logger.setLevel(saved_level)
