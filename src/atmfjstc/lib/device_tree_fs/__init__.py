"""
Utilities for reading a device tree exposed as a filesystem, e.g. the ``/proc/device-tree`` view provided by Linux.

In this representation, every directory is a node and every regular file is a property holding an opaque byte buffer.
The buffer carries no type information whatsoever, so this package also provides a heuristic classifier that figures
out whether a property is empty, a list of strings, a list of 32-bit big-endian words or just a bunch of bytes, along
with decoders for accessing individual strings and words.

Overview of the modules:

- `paths`: joining paths and checking whether a path is a node or a property
- `properties`: classifying and decoding property buffers
- `store`: the storage abstraction the tree is read from (local filesystem or memory)
- `traversal`: listing the children of a node and retrieving property data, via visitors or iteration
- `walk`: recursively walking a whole (sub)tree
- `dtfs_tree`: the ``dtfs-tree`` command-line program, which dumps a device tree in human-readable form

Note that the package is strictly read-only. It never writes to the tree, and it does not know anything about what
specific properties mean.
"""

__version__ = '0.1.0'


from typing import Union
from os import PathLike


PathType = Union[str, PathLike]


DEFAULT_DEVICE_TREE_PATH = '/proc/device-tree'
"""Where Linux conventionally exposes the device tree of the running system."""
