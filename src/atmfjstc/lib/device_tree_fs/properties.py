"""
Classification and decoding of device tree property buffers.

A property buffer carries no header or type tag. Its shape is guessed purely from the bytes, using the following rules
(in order, first match wins):

1. An empty buffer is a ``SIMPLE`` property (i.e. a flag whose mere presence is meaningful)
2. A buffer made up entirely of non-empty runs of printable characters, each terminated by a NUL, is a ``STRINGS``
   property
3. A buffer whose length is a multiple of 4 is a ``WORDS`` property (big-endian 32-bit cells)
4. Anything else is a ``BYTES`` property

Note that rule 2 takes precedence over rule 3: ``b"abc\\0"`` is a string, even though it could just as well be a word.

All decoding functions re-check the classification of the buffer they are given, so a buffer can never be decoded
according to a shape it does not have.
"""

import re
import weakref

from enum import IntEnum
from typing import NamedTuple, Optional, Union, MutableMapping

from atmfjstc.lib.device_tree_fs.errors import PropertyTypeMismatchError, PropertyIndexError, \
    PropertyBufferReleasedError


class PropertyType(IntEnum):
    SIMPLE = 0
    STRINGS = 1
    WORDS = 2
    BYTES = 3


class PropertyClass(NamedTuple):
    type: PropertyType
    count: Optional[int]
    "Number of strings, words or bytes in the property. None for SIMPLE properties."


PropertyData = Union[bytes, bytearray, memoryview, 'PropertyBuffer']

WORD_SIZE = 4


# Printable is meant in the sense of C's isprint() in the "C" locale
_STRING_RUN_RE = re.compile(rb'([\x20-\x7e]+)\x00')
_STRING_LIST_RE = re.compile(rb'(?:[\x20-\x7e]+\x00)+')


def classify_property(data: Optional[PropertyData], length: Optional[int] = None) -> PropertyClass:
    """
    Determines the shape of a property buffer and the number of elements in it.

    Args:
        data: The property data. Can be any bytes-like object or a `PropertyBuffer`. None is accepted as a stand-in
            for an empty buffer.
        length: The length of the data. By default, the entire buffer is considered. A shorter length restricts the
            classification to a prefix of the buffer.

    Returns:
        A `PropertyClass` tuple containing the type and, for all types other than SIMPLE, the element count.

    Raises:
        ValueError: If the length is negative or exceeds the size of the buffer.
    """

    view = _resolve_view(data, length)

    if len(view) == 0:
        return PropertyClass(PropertyType.SIMPLE, None)
    if _STRING_LIST_RE.fullmatch(view) is not None:
        return PropertyClass(PropertyType.STRINGS, sum(1 for _ in _STRING_RUN_RE.finditer(view)))
    if len(view) % WORD_SIZE == 0:
        return PropertyClass(PropertyType.WORDS, len(view) // WORD_SIZE)

    return PropertyClass(PropertyType.BYTES, len(view))


def word_get(data: Optional[PropertyData], length: Optional[int], n: int) -> int:
    """
    Gets the n-th 32-bit word in a WORDS property.

    Args:
        data: The property data, as for `classify_property`
        length: The length of the data, or None to use the whole buffer
        n: The index of the word

    Returns:
        The word, decoded from big-endian and unsigned.

    Raises:
        PropertyTypeMismatchError: If the buffer does not classify as WORDS.
        PropertyIndexError: If there is no word with index `n`.
    """

    view = _resolve_view(data, length)
    count = _require_type(view, PropertyType.WORDS).count

    if (n < 0) or ((n + 1) * WORD_SIZE > len(view)):
        raise PropertyIndexError(n, count)

    return int.from_bytes(view[n * WORD_SIZE:(n + 1) * WORD_SIZE], byteorder='big', signed=False)


def string_get(data: Optional[PropertyData], length: Optional[int], n: int) -> memoryview:
    """
    Gets the n-th string in a STRINGS property.

    The string is not copied. What is returned is a view into the original buffer, not including the NUL terminator.
    Use ``bytes(view).decode('ascii')`` or similar to get an independent `str`.

    Each call scans the buffer from the start, so accessing all strings this way is quadratic. This is not a problem
    for the property sizes found in practice.

    Args:
        data: The property data, as for `classify_property`. If this is a `PropertyBuffer`, the returned view will be
            released along with the buffer.
        length: The length of the data, or None to use the whole buffer
        n: The index of the string

    Returns:
        A `memoryview` covering the string's characters.

    Raises:
        PropertyTypeMismatchError: If the buffer does not classify as STRINGS.
        PropertyIndexError: If there is no string with index `n`.
    """

    view = _resolve_view(data, length)
    count = _require_type(view, PropertyType.STRINGS).count

    if n >= 0:
        for index, match in enumerate(_STRING_RUN_RE.finditer(view)):
            if index == n:
                result = view[match.start(1):match.end(1)]

                return data._track(result) if isinstance(data, PropertyBuffer) else result

    raise PropertyIndexError(n, count)


class PropertyBuffer:
    """
    Holds the data of a property for the duration of a single access.

    This is what the traversal functions hand to property visitors. The buffer, and every string view obtained from it,
    becomes unusable once `release()` is called (which the traversal functions do as soon as the visitor returns).
    Use `copy()` to keep the data around for longer.

    A `PropertyBuffer` can be passed wherever the decoding functions in this module expect data.
    """

    path: Optional[str]

    _view: Optional[memoryview]
    _derived_views: MutableMapping[int, memoryview]

    def __init__(self, data: Union[bytes, bytearray, memoryview], path: Optional[str] = None):
        self.path = path

        self._view = memoryview(data)
        if (self._view.ndim != 1) or (self._view.itemsize != 1):
            self._view = self._view.cast('B')

        # Keyed by id() since writable views are unhashable. Views dropped by the caller vanish on their own.
        self._derived_views = weakref.WeakValueDictionary()

    @property
    def view(self) -> memoryview:
        if self._view is None:
            raise PropertyBufferReleasedError(self.path)

        return self._view

    def __len__(self) -> int:
        return len(self.view)

    def __bytes__(self) -> bytes:
        return self.view.tobytes()

    def __enter__(self) -> 'PropertyBuffer':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()

    def is_released(self) -> bool:
        return self._view is None

    def classify(self) -> PropertyClass:
        return classify_property(self)

    def word_at(self, n: int) -> int:
        return word_get(self, None, n)

    def string_at(self, n: int) -> memoryview:
        return string_get(self, None, n)

    def copy(self) -> bytes:
        """
        Returns an independent copy of the data, which remains valid after the buffer is released.
        """
        return self.view.tobytes()

    def release(self):
        """
        Releases the buffer along with all string views handed out for it. Calling this more than once is harmless.
        """

        for view in list(self._derived_views.values()):
            view.release()

        self._derived_views.clear()

        if self._view is not None:
            self._view.release()
            self._view = None

    def _track(self, view: memoryview) -> memoryview:
        self._derived_views[id(view)] = view
        return view

    def __repr__(self) -> str:
        if self._view is None:
            return f"PropertyBuffer(path={self.path!r}, released)"

        return f"PropertyBuffer(path={self.path!r}, length={len(self._view)})"


def _resolve_view(data: Optional[PropertyData], length: Optional[int]) -> memoryview:
    if data is None:
        if length not in (None, 0):
            raise ValueError(f"Length must be 0 when no data is provided (is: {length})")

        return memoryview(b'')

    if isinstance(data, PropertyBuffer):
        view = data.view
    else:
        view = memoryview(data)
        if (view.ndim != 1) or (view.itemsize != 1):
            view = view.cast('B')

    if length is None:
        return view

    if (length < 0) or (length > len(view)):
        raise ValueError(f"Length must be between 0 and the buffer size of {len(view)} (is: {length})")

    return view[:length]


def _require_type(view: memoryview, expected_type: PropertyType) -> PropertyClass:
    prop_class = classify_property(view)

    if prop_class.type != expected_type:
        raise PropertyTypeMismatchError(expected_type, prop_class.type)

    return prop_class
