"""
The ``dtfs-tree`` program: dumps a device tree exposed as a filesystem in human-readable form.

Usage: ``dtfs-tree [-h] [base path]``, where the base path defaults to ``/proc/device-tree``.

Nodes are printed as ``+ <path>``, and properties as ``| <path>``, followed, for non-empty properties, by the element
count and the decoded values, e.g.::

    + /proc/device-tree/cpus
    | /proc/device-tree/cpus/#address-cells (1) = <0x00000001>
    | /proc/device-tree/compatible (2) = "acme,board", "acme,soc"
    | /proc/device-tree/chosen/kaslr-seed (2) = <0x00000000 0x00000000>
    | /proc/device-tree/some-blob (3) = [0aff10]
    | /proc/device-tree/dma-coherent
"""

import sys
import logging

from typing import Optional, List, TextIO

from atmfjstc.lib.device_tree_fs import DEFAULT_DEVICE_TREE_PATH
from atmfjstc.lib.device_tree_fs.console import console, init_console_logging, pretty_unhandled
from atmfjstc.lib.device_tree_fs.errors import DeviceTreeFSError
from atmfjstc.lib.device_tree_fs.properties import PropertyData, PropertyType, classify_property, string_get, \
    word_get
from atmfjstc.lib.device_tree_fs.walk import walk_tree


PROGRAM_NAME = 'dtfs-tree'

USAGE = f"Usage: {PROGRAM_NAME} [-h] [base path]"


def format_property(path: str, data: Optional[PropertyData], length: int) -> str:
    prop_type, count = classify_property(data, length)

    if prop_type == PropertyType.SIMPLE:
        return f"| {path}"

    if prop_type == PropertyType.STRINGS:
        values = ', '.join(_quote(string_get(data, length, i)) for i in range(count))
    elif prop_type == PropertyType.WORDS:
        values = '<' + ' '.join(f"0x{word_get(data, length, i):08X}" for i in range(count)) + '>'
    else:
        values = '[' + bytes(data)[:length].hex() + ']'

    return f"| {path} ({count}) = {values}"


def _quote(string_view: memoryview) -> str:
    return '"' + bytes(string_view).decode('ascii') + '"'


class TreePrinter:
    _out: TextIO

    def __init__(self, out: TextIO):
        self._out = out

    def print_node(self, path: str):
        print(f"+ {path}", file=self._out)

    def print_property(self, path: str, data: Optional[PropertyData], length: int):
        print(format_property(path, data, length), file=self._out)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point for ``dtfs-tree``. Only the first argument is considered: either ``-h``, or the base path. Anything
    after it is ignored.
    """

    if argv is None:
        argv = sys.argv[1:]

    if (len(argv) > 0) and (argv[0] == '-h'):
        print(USAGE, file=sys.stderr)
        return 1

    return _run(argv[0] if len(argv) > 0 else DEFAULT_DEVICE_TREE_PATH)


@pretty_unhandled
def _run(base_path: str) -> int:
    previous_log_level = logging.root.level
    log_handler = init_console_logging()

    try:
        printer = TreePrinter(sys.stdout)
        walk_tree(base_path, on_node=printer.print_node, on_property=printer.print_property)
    except DeviceTreeFSError as e:
        console.print_error(f"Failed to walk device tree at '{base_path}': {e}")
        return 1
    finally:
        logging.root.removeHandler(log_handler)
        logging.root.setLevel(previous_log_level)

    return 0
