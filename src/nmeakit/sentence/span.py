"""Non-owning views over contiguous byte buffers.

A span is a ``(memoryview, length)`` pair. It never copies or owns the
underlying storage: the caller keeps the buffer alive for as long as any
span refers to it. Slicing a span yields another span over the same memory.
"""

from __future__ import annotations

from typing import Any, Iterator, Optional, Union

BufferLike = Union[bytes, bytearray, memoryview, "ByteSpan"]


def _as_memoryview(data: Any) -> memoryview:
    if isinstance(data, ByteSpan):
        return data.memoryview()
    view = memoryview(data)
    if view.ndim != 1 or view.itemsize != 1:
        view = view.cast("B")
    return view


class ByteSpan:
    """Immutable view of a contiguous byte sequence."""

    __slots__ = ("_view",)

    def __init__(self, data: Optional[Any] = None, length: Optional[int] = None):
        if data is None:
            if length:
                raise ValueError("a span without data must have length 0")
            self._view = memoryview(b"")
            return
        view = _as_memoryview(data)
        if length is not None:
            if length < 0 or length > len(view):
                raise ValueError(f"length {length} outside buffer of {len(view)} bytes")
            view = view[:length]
        self._view = self._wrap(view)

    @staticmethod
    def _wrap(view: memoryview) -> memoryview:
        return view.toreadonly()

    @classmethod
    def _from_view(cls, view: memoryview) -> "ByteSpan":
        span = cls.__new__(cls)
        span._view = cls._wrap(view)
        return span

    def __len__(self) -> int:
        return len(self._view)

    def __bool__(self) -> bool:
        return len(self._view) > 0

    def empty(self) -> bool:
        return len(self._view) == 0

    def __getitem__(self, index):
        if isinstance(index, slice):
            return self._from_view(self._view[index])
        return self._view[index]

    def __iter__(self) -> Iterator[int]:
        return iter(self._view)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ByteSpan):
            return self._view == other._view
        if isinstance(other, (bytes, bytearray, memoryview)):
            return self._view == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.tobytes()!r})"

    @property
    def readonly(self) -> bool:
        return self._view.readonly

    def memoryview(self) -> memoryview:
        return self._view

    def tobytes(self) -> bytes:
        return self._view.tobytes()

    def decode(self, encoding: str = "ascii", errors: str = "replace") -> str:
        return str(self._view, encoding, errors)

    def find(self, byte: int, start: int = 0) -> int:
        for idx in range(start, len(self._view)):
            if self._view[idx] == byte:
                return idx
        return -1

    def rfind(self, byte: int) -> int:
        for idx in range(len(self._view) - 1, -1, -1):
            if self._view[idx] == byte:
                return idx
        return -1


class MutableByteSpan(ByteSpan):
    """Writable view of a contiguous byte sequence.

    Subclassing :class:`ByteSpan` makes every mutable span usable wherever a
    read-only one is expected, without a conversion step.
    """

    __slots__ = ()

    def __init__(self, data: Optional[Any] = None, length: Optional[int] = None):
        if data is not None and _as_memoryview(data).readonly:
            raise TypeError(f"{type(data).__name__} buffer is read-only")
        super().__init__(data if data is not None else bytearray(), length)

    @staticmethod
    def _wrap(view: memoryview) -> memoryview:
        return view

    def __setitem__(self, index, value) -> None:
        self._view[index] = value

    def write(self, offset: int, data: bytes) -> int:
        end = offset + len(data)
        self._view[offset:end] = data
        return end

    def as_readonly(self) -> ByteSpan:
        return ByteSpan._from_view(self._view)


def as_bytes(data: Any, length: Optional[int] = None) -> ByteSpan:
    """Create a read-only span over *data* (or its first *length* bytes)."""
    if isinstance(data, MutableByteSpan):
        span = data.as_readonly()
        return span if length is None else span[:length]
    if isinstance(data, ByteSpan) and length is None:
        return data
    return ByteSpan(data, length)


def as_writable_bytes(data: Any, length: Optional[int] = None) -> MutableByteSpan:
    """Create a writable span over *data*; read-only buffers raise ``TypeError``."""
    if isinstance(data, MutableByteSpan) and length is None:
        return data
    return MutableByteSpan(data, length)
