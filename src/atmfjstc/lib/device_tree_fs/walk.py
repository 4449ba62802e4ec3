import logging

from typing import Callable, Optional

from atmfjstc.lib.device_tree_fs import PathType
from atmfjstc.lib.device_tree_fs.errors import DeviceTreeStoreError
from atmfjstc.lib.device_tree_fs.paths import concat_path, check_path, PathKind
from atmfjstc.lib.device_tree_fs.store import DeviceTreeStore
from atmfjstc.lib.device_tree_fs.traversal import list_node, get_property, PropertyVisitor


LOG = logging.getLogger(__name__)


def walk_tree(
    base: Optional[PathType], on_node: Callable[[str], None], on_property: PropertyVisitor,
    on_invalid: Optional[Callable[[str], None]] = None, node_path: Optional[PathType] = None,
    store: Optional[DeviceTreeStore] = None
):
    """
    Walks an entire (sub)tree, depth first.

    For every node encountered below the starting point, `on_node` is called with its full path, after which its
    children are visited. For every property, `on_property` is called as per `get_property`. Entries that are neither
    nodes nor properties (or that vanished in the meantime) are passed to `on_invalid`, or just skipped if no such
    callback is provided. Either way, `check_path` will already have logged a warning for them.

    Failures to list a subnode or to read a property are logged and the walk carries on with the siblings. Only a
    failure to list the starting node itself is raised.

    Args:
        base: The base path. Must be non-empty.
        on_node: Called with the full path of each node
        on_property: Called with the full path, data and length of each property
        on_invalid: Called with the full path of each entry that is neither a node nor a property (optional)
        node_path: The path complement for the starting node (optional)
        store: The store to read from. By default, the local filesystem is used.

    Raises:
        InvalidBasePathError: If the base is None or empty.
        NodeListError: If the starting node could not be listed.
    """

    def _visit_child(path: str, name: str):
        full_path = concat_path(path, name)
        kind = check_path(path, name, store)

        if kind == PathKind.NODE:
            on_node(full_path)

            try:
                list_node(path, name, _visit_child, store)
            except DeviceTreeStoreError as e:
                LOG.warning("Skipping node %s: %s", full_path, e)
        elif kind == PathKind.PROPERTY:
            try:
                get_property(path, name, on_property, store)
            except DeviceTreeStoreError as e:
                LOG.warning("Skipping property %s: %s", full_path, e)
        elif on_invalid is not None:
            on_invalid(full_path)
        else:
            LOG.debug("Ignoring invalid path %s", full_path)

    list_node(base, node_path, _visit_child, store)
