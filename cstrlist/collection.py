"""
String containers - StringCollection and CStringArrayView.

StringCollection owns a list of strings and keeps a parallel ``char**``
array pointing at them, ready to hand to a C function that takes an array
of NUL-terminated strings plus a count.

Memory Safety Contract:
- Each string lives in its own ctypes buffer owned by the collection
- The pointer array is rebuilt, in full, inside every mutating call
- ``c_arr`` is borrowed: it is valid until the next mutation of the
  collection or until the collection is garbage collected
- Never cache ``c_arr`` across a mutation; ask for it again
- ``view()`` returns a checked view that raises StateError once stale

Copy vs move:
- ``copy()`` duplicates every string into new buffers and builds a new
  pointer array over them
- ``move()`` hands the buffers and the pointer array over unchanged (no
  string is reallocated); the source is left empty
"""

from __future__ import annotations

import ctypes
import operator
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import Any

from ._bindings import (
    CStringList,
    alloc_string_buffer,
    as_pointer,
    buffer_bytes,
    build_pointer_array,
    coerce_item,
    coerce_items,
    read_c_array,
)
from ._logging import scoped_logger
from .exceptions import ResourceError, StateError, ValidationError

__all__ = ["StringCollection", "CStringArrayView"]

log = scoped_logger("collection")


@contextmanager
def _allocation_guard(operation: str, count: int) -> Iterator[None]:
    """Re-raise allocation failures as ResourceError."""
    try:
        yield
    except ResourceError:
        raise
    except MemoryError as e:
        log.error("Allocation failed", extra={"operation": operation, "count": count})
        raise ResourceError(
            f"Out of memory during {operation}",
            details={"operation": operation, "count": count},
        ) from e


class StringCollection:
    """
    Owned list of strings with a synchronized C string-pointer array.

    Items may be ``str`` (encoded with ``encoding``) or bytes-like. A single
    string argument is one item, never iterated character by character.

    Args:
        items: None, a single string, an iterable of strings, or another
            StringCollection (copied).
        encoding: Encoding used to convert ``str`` items to bytes and back.
        errors: Error handler for that conversion. The default,
            ``"surrogateescape"``, lets bytes that are not valid in
            ``encoding`` read back as ``str`` and re-encode to the same bytes.

    Raises
    ------
        TypeError: An item is not str or bytes-like.
        ValidationError: An item contains a NUL byte.
        ResourceError: Storage could not be allocated.

    Examples
    --------
        >>> topics = StringCollection(["sensors/temp", "sensors/rh"])
        >>> lib.subscribe_many(topics.c_arr, len(topics))

        A collection can also be passed directly, it converts itself to
        ``char**`` through ``_as_parameter_``:

        >>> lib.subscribe_many(topics, len(topics))
    """

    __slots__ = ("_buffers", "_c_arr", "_generation", "_encoding", "_errors", "__weakref__")

    def __init__(
        self,
        items: Any = None,
        *,
        encoding: str = "utf-8",
        errors: str = "surrogateescape",
    ) -> None:
        self._encoding = encoding
        self._errors = errors
        self._generation = 0
        self._buffers: list[Any] = []
        self._c_arr = build_pointer_array(self._buffers)
        self._commit(self._allocate(self._source_bytes(items, "construct"), "construct"))

    @classmethod
    def from_c_array(
        cls,
        ptr: Any,
        count: Any,
        *,
        encoding: str = "utf-8",
        errors: str = "surrogateescape",
    ) -> StringCollection:
        """
        Copy a foreign ``char**`` + count into a new collection.

        Args:
            ptr: ``POINTER(c_char_p)``, ctypes array, ``c_void_p`` or address.
            count: Number of entries.

        Raises
        ------
            ValidationError: NULL array with non-zero count, or a NULL entry.
        """
        return cls(read_c_array(ptr, count), encoding=encoding, errors=errors)

    # =========================================================================
    # Synchronization
    # =========================================================================

    def _source_bytes(self, source: Any, operation: str) -> list[bytes]:
        if isinstance(source, StringCollection):
            return source._raw()
        with _allocation_guard(operation, 0):
            return coerce_items(source, self._encoding, self._errors)

    def _allocate(self, datas: list[bytes], operation: str) -> list[Any]:
        with _allocation_guard(operation, len(datas)):
            return [alloc_string_buffer(data) for data in datas]

    def _commit(self, buffers: list[Any]) -> None:
        """Install a new owned sequence and rebuild the pointer array over it.

        The array is complete before anything is swapped, so a failure
        leaves the previous state in place. The buffer list is replaced,
        never mutated, which keeps running iterators on the old one.
        """
        with _allocation_guard("rebuild", len(buffers)):
            c_arr = build_pointer_array(buffers)
        self._buffers = buffers
        self._c_arr = c_arr
        self._generation += 1
        log.debug("Rebuilt pointer array", extra={"count": len(buffers)})

    def _raw(self) -> list[bytes]:
        return [buffer_bytes(buf) for buf in self._buffers]

    def _decode(self, data: bytes) -> str:
        return data.decode(self._encoding, self._errors)

    def _repr_item(self, buf: Any) -> str:
        data = buffer_bytes(buf)
        try:
            return repr(self._decode(data))
        except UnicodeDecodeError:
            return repr(data)

    def _normalize_index(self, idx: Any) -> int:
        idx = operator.index(idx)
        length = len(self._buffers)
        pos = idx + length if idx < 0 else idx
        if pos < 0 or pos >= length:
            raise IndexError(f"String index {idx} out of range [0, {length})")
        return pos

    # =========================================================================
    # Mutation
    # =========================================================================

    def append(self, item: str | bytes) -> None:
        """Append one string and rebuild the pointer array."""
        with _allocation_guard("append", 1):
            data = coerce_item(item, self._encoding, self._errors)
        new_buf = self._allocate([data], "append")[0]
        self._commit([*self._buffers, new_buf])

    def extend(self, items: Iterable[str | bytes] | str | bytes) -> None:
        """Append every item in order, all or nothing, with one rebuild."""
        new_bufs = self._allocate(self._source_bytes(items, "extend"), "extend")
        if new_bufs:
            self._commit([*self._buffers, *new_bufs])

    def __iadd__(self, items: Any) -> StringCollection:
        self.extend(items)
        return self

    def clear(self) -> None:
        """Remove all strings. Every previously returned pointer is invalid."""
        self._commit([])

    def assign(self, source: Any) -> None:
        """
        Replace the contents with an independent copy of ``source``.

        ``source`` is anything the constructor accepts. On error the
        collection is left unchanged.
        """
        if source is self:
            return
        self._commit(self._allocate(self._source_bytes(source, "assign"), "assign"))

    # =========================================================================
    # Copy / Move
    # =========================================================================

    def copy(self) -> StringCollection:
        """Deep copy: new buffers, new pointer array, no shared storage."""
        log.debug("Copying collection", extra={"count": len(self._buffers)})
        return type(self)(self, encoding=self._encoding, errors=self._errors)

    def __copy__(self) -> StringCollection:
        return self.copy()

    def __deepcopy__(self, memo: dict) -> StringCollection:
        return self.copy()

    def move(self) -> StringCollection:
        """
        Transfer the strings to a new collection and leave this one empty.

        The buffers and the pointer array change owner as they are, so a
        ``c_arr`` obtained before the move still addresses the same strings
        through the new collection. Views taken from this collection go
        stale.
        """
        moved = type(self).__new__(type(self))
        moved._encoding = self._encoding
        moved._errors = self._errors
        moved._buffers = self._buffers
        moved._c_arr = self._c_arr
        moved._generation = 0
        self._commit([])
        log.debug("Moved collection", extra={"count": len(moved._buffers)})
        return moved

    def move_from(self, other: StringCollection) -> None:
        """Take over ``other``'s strings and pointer array; ``other`` becomes empty."""
        if not isinstance(other, StringCollection):
            raise TypeError(f"expected StringCollection, got {type(other).__name__}")
        if other is self:
            return
        self._encoding = other._encoding
        self._errors = other._errors
        self._buffers = other._buffers
        self._c_arr = other._c_arr
        self._generation += 1
        other._commit([])
        log.debug("Moved collection", extra={"count": len(self._buffers)})

    # =========================================================================
    # Access
    # =========================================================================

    def __len__(self) -> int:
        return len(self._buffers)

    def __bool__(self) -> bool:
        return bool(self._buffers)

    @property
    def empty(self) -> bool:
        """True when the collection holds no strings."""
        return not self._buffers

    @property
    def encoding(self) -> str:
        return self._encoding

    def __getitem__(self, idx: int | slice) -> Any:
        """Get a decoded string by index, or a new collection for a slice."""
        if isinstance(idx, slice):
            return type(self)(
                [buffer_bytes(buf) for buf in self._buffers[idx]],
                encoding=self._encoding,
                errors=self._errors,
            )
        return self._decode(buffer_bytes(self._buffers[self._normalize_index(idx)]))

    def get_bytes(self, idx: int) -> bytes:
        """Raw bytes of one string, without the terminating zero."""
        return buffer_bytes(self._buffers[self._normalize_index(idx)])

    def __iter__(self) -> Iterator[str]:
        for buf in self._buffers:
            yield self._decode(buffer_bytes(buf))

    def __contains__(self, item: object) -> bool:
        try:
            data = coerce_item(item, self._encoding, self._errors)
        except (TypeError, ValidationError, UnicodeError):
            return False
        return any(buffer_bytes(buf) == data for buf in self._buffers)

    def __eq__(self, other: object) -> bool:
        """Compare with another StringCollection, or a list/tuple of strings."""
        if isinstance(other, StringCollection):
            return self._raw() == other._raw()
        if isinstance(other, (list, tuple)):
            try:
                return self._raw() == coerce_items(other, self._encoding, self._errors)
            except (TypeError, ValidationError, UnicodeError):
                return False
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def tolist(self) -> list[str]:
        """Convert to a Python list of str (copies data)."""
        return list(self)

    def __repr__(self) -> str:
        # Items that do not decode are shown as bytes
        bufs = self._buffers
        length = len(bufs)
        if length <= 10:
            items_str = f"[{', '.join(map(self._repr_item, bufs))}]"
        else:
            first = ", ".join(map(self._repr_item, bufs[:5]))
            last = ", ".join(map(self._repr_item, bufs[-3:]))
            items_str = f"[{first}, ..., {last}]"
        return f"StringCollection({items_str}, len={length})"

    # =========================================================================
    # C interop
    # =========================================================================

    @property
    def c_arr(self) -> Any:
        """
        ``char**`` over the current strings, exactly ``len(self)`` entries.

        There is no trailing NULL; pass ``len(self)`` alongside. The pointer
        is borrowed and valid only until the next mutation or until this
        collection is garbage collected. Re-request it after any change.
        """
        return as_pointer(self._c_arr)

    @property
    def _as_parameter_(self) -> Any:
        return as_pointer(self._c_arr)

    @property
    def c_count(self) -> Any:
        """Number of entries as ``c_size_t``."""
        return ctypes.c_size_t(len(self._buffers))

    def as_string_list(self) -> CStringList:
        """Array and count packed in a CStringList struct (borrowed, like ``c_arr``)."""
        return CStringList(self.c_arr, len(self._buffers))

    def view(self) -> CStringArrayView:
        """Checked read-only view of the pointer array."""
        return CStringArrayView(self)


class CStringArrayView:
    """
    Read-only view of a StringCollection's pointer array.

    Reads go through the raw ``char**``, so they show exactly what a C
    consumer would see. The view is tied to the state of its collection at
    the time it was taken: after any mutation, move or clear, every read
    raises StateError instead of touching memory.

        >>> topics = StringCollection(["a", "bb"])
        >>> view = topics.view()
        >>> list(view)
        [b'a', b'bb']
        >>> topics.append("ccc")
        >>> view[0]
        StateError: Pointer array view is stale ...
    """

    __slots__ = ("_owner", "_generation", "_ptr", "_count")

    def __init__(self, owner: StringCollection):
        self._owner = owner
        self._generation = owner._generation
        self._ptr = owner.c_arr
        self._count = len(owner)

    @property
    def is_valid(self) -> bool:
        """False once the collection has changed since the view was taken."""
        return self._owner._generation == self._generation

    def _check_valid(self) -> None:
        if not self.is_valid:
            raise StateError(
                "Pointer array view is stale: the collection changed after the view "
                "was taken. Request a new view.",
                code="STALE_VIEW",
                details={
                    "view_generation": self._generation,
                    "current_generation": self._owner._generation,
                },
            )

    @property
    def pointer(self) -> Any:
        """The raw ``char**`` this view reads through."""
        self._check_valid()
        return self._ptr

    @property
    def count(self) -> int:
        self._check_valid()
        return self._count

    def __len__(self) -> int:
        self._check_valid()
        return self._count

    def __getitem__(self, idx: int | slice) -> bytes | list[bytes]:
        """Bytes of one entry (read up to its NUL), or a list for a slice."""
        self._check_valid()
        if isinstance(idx, slice):
            return [self._ptr[i] for i in range(*idx.indices(self._count))]

        idx = operator.index(idx)
        pos = idx + self._count if idx < 0 else idx
        if pos < 0 or pos >= self._count:
            raise IndexError(f"Pointer index {idx} out of range [0, {self._count})")
        return self._ptr[pos]

    def __iter__(self) -> Iterator[bytes]:
        for i in range(self._count):
            self._check_valid()
            yield self._ptr[i]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (list, tuple)):
            return list(self) == list(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def decode(self) -> list[str]:
        """Decode every entry with the collection's encoding."""
        owner = self._owner
        return [item.decode(owner._encoding, owner._errors) for item in self]

    def __repr__(self) -> str:
        if not self.is_valid:
            return f"CStringArrayView(<stale>, len={self._count})"
        return f"CStringArrayView({list(self)!r}, len={self._count})"
