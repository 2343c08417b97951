"""
ctypes helpers for arrays of NUL-terminated strings.

This is the storage layer behind StringCollection: it coerces Python values
into owned C string buffers, lays out the ``char**`` pointer array over
them, and copies strings back out of a foreign ``char**`` + count pair.
"""

from __future__ import annotations

import ctypes
from collections.abc import Sequence
from typing import Any

from .exceptions import ValidationError

__all__ = [
    "CharPtrArray",
    "CStringList",
    "coerce_item",
    "coerce_items",
    "alloc_string_buffer",
    "buffer_bytes",
    "build_pointer_array",
    "as_pointer",
    "read_c_array",
]

# const char** as seen from ctypes
CharPtrArray = ctypes.POINTER(ctypes.c_char_p)

_BYTES_LIKE = (bytes, bytearray, memoryview)


class CStringList(ctypes.Structure):
    """
    Array-plus-count pair for C APIs that take both in one struct.

    Layout::

        struct { const char** items; size_t count; }
    """

    _fields_ = [
        ("items", CharPtrArray),
        ("count", ctypes.c_size_t),
    ]


# =============================================================================
# Item coercion
# =============================================================================


def is_single_item(value: Any) -> bool:
    """True for values that are one string rather than a sequence of them."""
    return isinstance(value, (str, *_BYTES_LIKE))


def coerce_item(item: Any, encoding: str, errors: str) -> bytes:
    """
    Convert one item to the bytes stored in its C buffer.

    Raises:
        TypeError: Item is not str or bytes-like.
        ValidationError: Item contains a NUL byte.
    """
    if isinstance(item, str):
        data = item.encode(encoding, errors)
    elif isinstance(item, _BYTES_LIKE):
        data = bytes(item)
    else:
        raise TypeError(f"expected str or bytes-like item, got {type(item).__name__}")

    nul = data.find(b"\x00")
    if nul != -1:
        raise ValidationError(
            "String contains a NUL byte and cannot be passed as a C string",
            details={"offset": nul, "length": len(data)},
        )
    return data


def coerce_items(source: Any, encoding: str, errors: str) -> list[bytes]:
    """
    Convert constructor/assignment input to a list of item bytes.

    ``None`` is empty, a single str/bytes-like value is one item, anything
    else is iterated. Every item is converted before returning, so a bad
    item anywhere leaves the caller with nothing to commit.
    """
    if source is None:
        return []
    if is_single_item(source):
        return [coerce_item(source, encoding, errors)]
    try:
        items = iter(source)
    except TypeError:
        raise TypeError(
            f"expected a string or an iterable of strings, got {type(source).__name__}"
        ) from None
    return [coerce_item(item, encoding, errors) for item in items]


# =============================================================================
# Buffers and pointer arrays
# =============================================================================


def alloc_string_buffer(data: bytes) -> ctypes.Array:
    """Allocate an owned ``char[len(data) + 1]`` holding data and a trailing zero."""
    return ctypes.create_string_buffer(data)


def buffer_bytes(buf: ctypes.Array) -> bytes:
    """Logical contents of a string buffer (terminator excluded)."""
    return buf.raw[:-1]


def build_pointer_array(buffers: Sequence[ctypes.Array]) -> ctypes.Array:
    """
    Lay out a ``char*[n]`` holding the current address of each buffer.

    The array only borrows: whoever owns ``buffers`` must keep them alive
    for as long as the array is read.
    """
    arr_type = ctypes.c_char_p * len(buffers)
    return arr_type(*(ctypes.addressof(buf) for buf in buffers))


def as_pointer(array: ctypes.Array) -> Any:
    """Decay a ``char*[n]`` array to ``char**``."""
    return ctypes.cast(array, CharPtrArray)


def read_c_array(ptr: Any, count: Any) -> list[bytes]:
    """
    Copy strings out of a foreign ``char**`` + count.

    Args:
        ptr: ``POINTER(c_char_p)``, a ctypes array, ``c_void_p`` or an
            integer address.
        count: Number of entries (int or ``c_size_t``).

    Returns:
        Independent copies of each string's bytes.

    Raises:
        ValidationError: Negative count, NULL array with a non-zero count,
            or a NULL entry.
    """
    count = getattr(count, "value", count)
    if count < 0:
        raise ValidationError("count must be non-negative", details={"count": count})
    if count == 0:
        return []

    if ptr is None or isinstance(ptr, int):
        ptr = ctypes.cast(ctypes.c_void_p(ptr), CharPtrArray)
    else:
        ptr = ctypes.cast(ptr, CharPtrArray)
    if not ptr:
        raise ValidationError("NULL string array with non-zero count", details={"count": count})

    results: list[bytes] = []
    for i in range(count):
        item = ptr[i]
        if item is None:
            raise ValidationError(
                f"NULL string pointer at index {i}", details={"index": i, "count": count}
            )
        results.append(item)
    return results
