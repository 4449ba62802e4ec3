from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from atmfjstc.lib.device_tree_fs.properties import PropertyType


class DeviceTreeFSError(Exception):
    """
    Base class for all exceptions raised by the device tree filesystem parser.
    """


class InvalidBasePathError(DeviceTreeFSError, ValueError):
    def __init__(self):
        super().__init__("Base path must be present and non-empty")


class DeviceTreeStoreError(DeviceTreeFSError):
    """
    Base class for failures in accessing the store that holds the tree (missing entries, permissions, I/O errors etc).

    The original `OSError`, if any, is available as the ``__cause__``.
    """

    path: str

    def __init__(self, path: str, message: str):
        super().__init__(message)

        self.path = path


class NodeListError(DeviceTreeStoreError):
    def __init__(self, path: str, reason: Optional[str] = None):
        super().__init__(path, f"Couldn't open node directory '{path}'{_reason_suffix(reason)}")


class NotAPropertyError(DeviceTreeStoreError):
    def __init__(self, path: str):
        super().__init__(path, f"Path '{path}' is not a property")


class PropertyReadError(DeviceTreeStoreError):
    def __init__(self, path: str, reason: Optional[str] = None, message: Optional[str] = None):
        super().__init__(path, message or f"Failed to read property '{path}'{_reason_suffix(reason)}")


class TruncatedPropertyReadError(PropertyReadError):
    expected_length: int
    actual_length: int

    def __init__(self, path: str, expected_length: int, actual_length: int):
        super().__init__(
            path,
            message=f"Truncated read for property '{path}': expected {expected_length} bytes, got {actual_length}"
        )

        self.expected_length = expected_length
        self.actual_length = actual_length


class PropertyDecodeError(DeviceTreeFSError):
    """
    Base class for errors in accessing the elements of a property buffer.
    """


class PropertyTypeMismatchError(PropertyDecodeError):
    expected_type: 'PropertyType'
    actual_type: 'PropertyType'

    def __init__(self, expected_type: 'PropertyType', actual_type: 'PropertyType'):
        super().__init__(f"Expected property of type {expected_type.name}, but the data is {actual_type.name}")

        self.expected_type = expected_type
        self.actual_type = actual_type


class PropertyIndexError(PropertyDecodeError, IndexError):
    index: int
    count: int

    def __init__(self, index: int, count: int):
        super().__init__(f"Element index {index} out of range, property has {count} element(s)")

        self.index = index
        self.count = count


class PropertyBufferReleasedError(DeviceTreeFSError, ValueError):
    def __init__(self, path: Optional[str] = None):
        super().__init__(
            "Property buffer" + (f" for '{path}'" if path is not None else "") + " used after being released"
        )


def _reason_suffix(reason: Optional[str]) -> str:
    return f" ({reason})" if reason else ""
