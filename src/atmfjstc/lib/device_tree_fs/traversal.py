"""
Single-level traversal of a device tree: listing the children of a node, and retrieving the data of a property.

Both operations come in two flavors:

- Visitor-based (`list_node`, `get_property`): a callback is invoked synchronously for each child, or once for the
  property data. Anything passed to the callback is only valid for the duration of that call.
- Iteration-based (`iter_node`, `open_property`): the caller pulls the children or holds the property data within a
  ``with`` block.

None of these functions recurse. See the `walk` module for walking an entire tree.
"""

import logging

from contextlib import contextmanager
from typing import Callable, Optional, Iterator, Tuple, List, ContextManager

from atmfjstc.lib.device_tree_fs import PathType
from atmfjstc.lib.device_tree_fs.errors import NodeListError, NotAPropertyError, PropertyReadError, \
    TruncatedPropertyReadError
from atmfjstc.lib.device_tree_fs.paths import concat_path, check_path, PathKind
from atmfjstc.lib.device_tree_fs.properties import PropertyBuffer
from atmfjstc.lib.device_tree_fs.store import DeviceTreeStore, default_store


LOG = logging.getLogger(__name__)

HIDDEN_ENTRY_PREFIX = '.'


ChildVisitor = Callable[[str, str], None]
"""Called with the path of the node being listed and the name of a child (node or property)"""

PropertyVisitor = Callable[[str, Optional[PropertyBuffer], int], None]
"""Called with the full path of the property, its data (None if empty) and the data length"""


def iter_node(base: Optional[PathType], node_path: Optional[PathType] = None,
              store: Optional[DeviceTreeStore] = None) -> Iterator[Tuple[str, str]]:
    """
    Lists the children (both subnodes and properties) of a node.

    The directory is read right away, so any failure is raised by this call and not upon iteration. Hidden entries
    (whose names start with a ``.``) are skipped. The order of the children is whatever the store provides.

    Args:
        base: The base path. Must be non-empty.
        node_path: The path complement (optional)
        store: The store to read from. By default, the local filesystem is used.

    Returns:
        An iterator over ``(node_path, child_name)`` tuples, where `node_path` is the joined path of the listed node.

    Raises:
        InvalidBasePathError: If the base is None or empty.
        NodeListError: If the node directory could not be opened.
    """

    full_path = concat_path(base, node_path)

    try:
        names = (store or default_store()).list_dir(full_path)
    except OSError as e:
        LOG.warning("Couldn't open the directory %s (%s)", full_path, e.strerror or e)
        raise NodeListError(full_path, e.strerror) from e

    return ((full_path, name) for name in names if not name.startswith(HIDDEN_ENTRY_PREFIX))


def list_node(base: Optional[PathType], node_path: Optional[PathType], visit: ChildVisitor,
              store: Optional[DeviceTreeStore] = None):
    """
    Visitor-based variant of `iter_node`. The visitor is called once for each (non-hidden) child.

    An empty node results in the visitor not being called at all, which is not an error.
    """

    if visit is None:
        raise ValueError("A child visitor must be provided")

    for full_path, name in iter_node(base, node_path, store):
        visit(full_path, name)


@contextmanager
def open_property(base: Optional[PathType], path: Optional[PathType] = None,
                  store: Optional[DeviceTreeStore] = None) -> ContextManager[PropertyBuffer]:
    """
    Reads the entire data of a property and makes it available for the duration of a ``with`` block::

        with open_property('/proc/device-tree', 'compatible') as data:
            print(data.classify())

    The path is checked to be a property right before reading (even if the caller has already checked it). The data
    is read in one go and released when the block is exited. Use `PropertyBuffer.copy()` if it is needed afterwards.

    Args:
        base: The base path. Must be non-empty.
        path: The path complement (optional)
        store: The store to read from. By default, the local filesystem is used.

    Returns:
        A context manager providing a `PropertyBuffer` (possibly empty), whose `path` is the full property path.

    Raises:
        InvalidBasePathError: If the base is None or empty.
        NotAPropertyError: If the path is not a property.
        TruncatedPropertyReadError: If fewer (or more) bytes were read than the size reported by the store.
        PropertyReadError: If the data could not be read for any other reason.
    """

    store = store or default_store()

    full_path = concat_path(base, path)

    if check_path(full_path, store=store) != PathKind.PROPERTY:
        raise NotAPropertyError(full_path)

    with PropertyBuffer(_read_property_data(full_path, store), path=full_path) as buffer:
        yield buffer


def get_property(base: Optional[PathType], path: Optional[PathType], visit: PropertyVisitor,
                 store: Optional[DeviceTreeStore] = None):
    """
    Visitor-based variant of `open_property`.

    The visitor is called exactly once. For an empty property, it receives None and a length of 0. This is a perfectly
    valid outcome and not an error. The buffer is released as soon as the visitor returns.
    """

    if visit is None:
        raise ValueError("A property visitor must be provided")

    with open_property(base, path, store) as buffer:
        length = len(buffer)

        if length > 0:
            visit(buffer.path, buffer, length)
        else:
            visit(buffer.path, None, 0)


def _read_property_data(full_path: str, store: DeviceTreeStore) -> bytes:
    try:
        size = store.stat(full_path).size
        if size == 0:
            return b''

        data = store.read_all(full_path)
    except OSError as e:
        LOG.warning("Failed to read property %s (%s)", full_path, e.strerror or e)
        raise PropertyReadError(full_path, e.strerror) from e

    if len(data) != size:
        LOG.warning("Truncated read for property %s", full_path)
        raise TruncatedPropertyReadError(full_path, size, len(data))

    return data


class NodeListCollector:
    """
    A child visitor that collects the names of the children into a list of limited size.

    Names that do not fit are not stored, but they are counted in `missed`.
    """

    max_entries: int
    names: List[str]
    missed: int

    def __init__(self, max_entries: int):
        if max_entries < 0:
            raise ValueError(f"max_entries must be non-negative (is: {max_entries})")

        self.max_entries = max_entries
        self.names = []
        self.missed = 0

    @property
    def count(self) -> int:
        return len(self.names)

    def __call__(self, path: str, name: str):
        if len(self.names) < self.max_entries:
            self.names.append(name)
        else:
            self.missed += 1


class PropertyDataCollector:
    """
    A property visitor that copies the data out of the callback, so that it remains available afterwards.
    """

    path: Optional[str] = None
    data: Optional[bytes] = None
    length: Optional[int] = None

    def __call__(self, path: str, data: Optional[PropertyBuffer], length: int):
        self.path = path
        self.data = data.view[:length].tobytes() if data is not None else b''
        self.length = length
