import os
import logging

from enum import IntEnum
from typing import Optional

from atmfjstc.lib.device_tree_fs import PathType
from atmfjstc.lib.device_tree_fs.errors import InvalidBasePathError
from atmfjstc.lib.device_tree_fs.store import DeviceTreeStore, EntryKind, default_store


LOG = logging.getLogger(__name__)

PATH_SEPARATOR = '/'


class PathKind(IntEnum):
    INVALID = -1
    NODE = 0
    PROPERTY = 1


def concat_path(base: Optional[PathType], path: Optional[PathType] = None) -> str:
    """
    Joins a base path and an (optional) path complement.

    A separator is inserted between the two only if the base does not already end with one and the complement does not
    already start with one. No other normalization is performed.

    Args:
        base: The base path. Must be non-empty.
        path: The path complement. If None, the base is returned as-is.

    Returns:
        The joined path, as a string.

    Raises:
        InvalidBasePathError: If the base is None or empty.
    """

    if base is None:
        raise InvalidBasePathError()

    base = os.fspath(base)
    if base == '':
        raise InvalidBasePathError()

    if path is None:
        return base

    path = os.fspath(path)

    if base.endswith(PATH_SEPARATOR) or path.startswith(PATH_SEPARATOR):
        return base + path

    return base + PATH_SEPARATOR + path


def check_path(base: Optional[PathType], path: Optional[PathType] = None,
               store: Optional[DeviceTreeStore] = None) -> PathKind:
    """
    Determines whether a path is a node or a property.

    Args:
        base: The base path. Must be non-empty.
        path: The path complement (optional)
        store: The store to query. By default, the local filesystem is used.

    Returns:
        `PathKind.NODE` for a directory, `PathKind.PROPERTY` for a regular file, and `PathKind.INVALID` for anything
        else, including a path that does not exist or cannot be accessed. Invalid paths are logged as warnings.

    Raises:
        InvalidBasePathError: If the base is None or empty.
    """

    full_path = concat_path(base, path)

    try:
        entry = (store or default_store()).stat(full_path)
    except OSError as e:
        LOG.warning("Stat failed for %s (%s)", full_path, e.strerror or e)
        return PathKind.INVALID

    if entry.kind == EntryKind.DIRECTORY:
        return PathKind.NODE
    if entry.kind == EntryKind.FILE:
        return PathKind.PROPERTY

    LOG.warning("%s is neither a node nor a property", full_path)
    return PathKind.INVALID
