"""
The storage abstraction a device tree is read from.

A store only needs to answer three questions about a path: what kind of entry is there (and how big it is), what
entries a directory contains, and what bytes a file contains. Failures are reported as `OSError` (or subclasses like
`FileNotFoundError`), exactly as the local filesystem would report them, so that callers need not care which store is
in use.

Stores are never written to.
"""

import os
import stat
import errno

from abc import ABCMeta, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, Mapping, Any, Union

from atmfjstc.lib.device_tree_fs import PathType


class EntryKind(Enum):
    DIRECTORY = 'directory'
    FILE = 'file'
    OTHER = 'other'


@dataclass(frozen=True)
class EntryStat:
    kind: EntryKind
    size: int
    "Size of the entry contents in bytes. Only meaningful for files."


class DeviceTreeStore(metaclass=ABCMeta):
    @abstractmethod
    def stat(self, path: PathType) -> EntryStat:
        """
        Gets the kind and size of the entry at a given path. Symbolic links are followed.

        Raises:
            OSError: If the entry does not exist or cannot be accessed
        """
        raise NotImplementedError

    @abstractmethod
    def list_dir(self, path: PathType) -> List[str]:
        """
        Gets the names of the entries directly under a directory, in whatever order the store provides them. The
        ``.`` and ``..`` pseudo-entries are not included.

        Raises:
            OSError: If the path does not exist, is not a directory, or cannot be opened
        """
        raise NotImplementedError

    @abstractmethod
    def read_all(self, path: PathType) -> bytes:
        """
        Reads the entire contents of a file in one go.

        Raises:
            OSError: If the path does not exist, is not a file, or cannot be read
        """
        raise NotImplementedError


class LocalDeviceTreeStore(DeviceTreeStore):
    """
    A store backed by the local filesystem (e.g. ``/proc/device-tree`` or an unpacked copy of it).
    """

    def stat(self, path: PathType) -> EntryStat:
        st = os.stat(path)

        if stat.S_ISDIR(st.st_mode):
            kind = EntryKind.DIRECTORY
        elif stat.S_ISREG(st.st_mode):
            kind = EntryKind.FILE
        else:
            kind = EntryKind.OTHER

        return EntryStat(kind=kind, size=st.st_size)

    def list_dir(self, path: PathType) -> List[str]:
        return os.listdir(path)

    def read_all(self, path: PathType) -> bytes:
        with open(path, 'rb') as f:
            return f.read()


class MemoryDeviceTreeStore(DeviceTreeStore):
    """
    A store holding a tree in memory, as nested mappings.

    Mappings represent nodes and bytes-like values represent properties. Any other value is treated as an entry that is
    neither a node nor a property. Example::

        MemoryDeviceTreeStore({
            'compatible': b'acme,board\\0',
            'cpus': {
                'cpu@0': {'reg': b'\\0\\0\\0\\0'},
            },
        })

    Paths are ``/``-separated. Empty and ``.`` components are ignored, so ``/cpus``, ``cpus`` and ``/cpus/./`` all
    refer to the same node, and ``/`` (or the empty path) refers to the root.
    """

    _tree: Mapping[str, Any]

    def __init__(self, tree: Mapping[str, Any]):
        self._tree = tree

    def stat(self, path: PathType) -> EntryStat:
        entry = self._lookup(path)

        if isinstance(entry, Mapping):
            return EntryStat(kind=EntryKind.DIRECTORY, size=0)
        if isinstance(entry, (bytes, bytearray, memoryview)):
            return EntryStat(kind=EntryKind.FILE, size=len(entry))

        return EntryStat(kind=EntryKind.OTHER, size=0)

    def list_dir(self, path: PathType) -> List[str]:
        entry = self._lookup(path)

        if not isinstance(entry, Mapping):
            raise _os_error(errno.ENOTDIR, path)

        return list(entry.keys())

    def read_all(self, path: PathType) -> bytes:
        entry = self._lookup(path)

        if isinstance(entry, Mapping):
            raise _os_error(errno.EISDIR, path)
        if not isinstance(entry, (bytes, bytearray, memoryview)):
            raise _os_error(errno.EINVAL, path)

        return bytes(entry)

    def _lookup(self, path: PathType) -> Union[Mapping[str, Any], bytes, Any]:
        path = os.fspath(path)

        entry = self._tree
        for component in path.split('/'):
            if component in ('', '.'):
                continue

            if not isinstance(entry, Mapping):
                raise _os_error(errno.ENOTDIR, path)
            if component not in entry:
                raise _os_error(errno.ENOENT, path)

            entry = entry[component]

        return entry


def _os_error(code: int, path: PathType) -> OSError:
    # OSError automatically picks the appropriate subclass (FileNotFoundError etc.) based on the errno
    return OSError(code, os.strerror(code), os.fspath(path))


_default_store = LocalDeviceTreeStore()


def default_store() -> DeviceTreeStore:
    """
    Gets the store used by all operations when no store is explicitly specified (i.e. the local filesystem).
    """
    return _default_store
