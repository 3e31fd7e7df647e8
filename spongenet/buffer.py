"""Byte buffers that can cheaply discard bytes from the front."""

from __future__ import annotations

from collections import deque
from typing import Iterable, Union

BytesLike = Union[bytes, bytearray, memoryview]


class Buffer:
    """A read-only byte string that can discard bytes from its front.

    Constructing a Buffer from another Buffer shares the underlying storage
    but keeps an independent starting offset.
    """

    __hash__ = None  # type: ignore[assignment]

    def __init__(self, data: "Buffer | BytesLike" = b"") -> None:
        if isinstance(data, Buffer):
            self._storage = data._storage
            self._offset = data._offset
        else:
            self._storage = bytes(data)
            self._offset = 0

    def __bytes__(self) -> bytes:
        return self._storage[self._offset:]

    def __len__(self) -> int:
        return len(self._storage) - self._offset

    def __getitem__(self, index):
        return bytes(self)[index]

    def __eq__(self, other) -> bool:
        if isinstance(other, Buffer):
            return bytes(self) == bytes(other)
        if isinstance(other, (bytes, bytearray, memoryview)):
            return bytes(self) == bytes(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"Buffer({bytes(self)!r})"

    def copy(self) -> bytes:
        """Return the contents as a new ``bytes`` object."""
        return bytes(self)

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes."""
        if n < 0 or n > len(self):
            raise IndexError("Buffer::remove_prefix")
        self._offset += n
        if self._storage and self._offset == len(self._storage):
            self._storage = b""
            self._offset = 0


class BufferList:
    """A discontiguous byte string made of several Buffers."""

    __hash__ = None  # type: ignore[assignment]

    def __init__(self, *args) -> None:
        self._buffers: deque[Buffer] = deque()
        for piece in args:
            self.append(piece)

    def buffers(self) -> tuple[Buffer, ...]:
        """Return the underlying Buffers in order."""
        return tuple(self._buffers)

    def append(self, other) -> None:
        """Append a BufferList, a Buffer or raw bytes."""
        if isinstance(other, BufferList):
            self._buffers.extend(Buffer(buf) for buf in other._buffers)
        else:
            self._buffers.append(Buffer(other))

    def to_buffer(self) -> Buffer:
        """Return the contents as a single Buffer; only valid if contiguous."""
        if not self._buffers:
            return Buffer()
        if len(self._buffers) == 1:
            return Buffer(self._buffers[0])
        raise ValueError(
            "BufferList: please use concatenate() to combine a multi-Buffer BufferList into one Buffer"
        )

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes across the Buffers."""
        while n > 0:
            if not self._buffers:
                raise IndexError("BufferList::remove_prefix")
            front = self._buffers[0]
            if n < len(front):
                front.remove_prefix(n)
                n = 0
            else:
                n -= len(front)
                self._buffers.popleft()

    def __len__(self) -> int:
        return sum(len(buf) for buf in self._buffers)

    def concatenate(self) -> bytes:
        """Return all contents joined into one ``bytes`` object."""
        return b"".join(bytes(buf) for buf in self._buffers)

    def __bytes__(self) -> bytes:
        return self.concatenate()

    def __eq__(self, other) -> bool:
        if isinstance(other, (BufferList, Buffer, bytes, bytearray, memoryview)):
            return self.concatenate() == bytes(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"BufferList({self.concatenate()!r})"


class BufferViewList:
    """A non-owning view of a discontiguous byte string."""

    def __init__(self, data) -> None:
        self._views: deque[memoryview] = deque()
        if isinstance(data, BufferList):
            pieces: Iterable[bytes] = (bytes(buf) for buf in data.buffers())
        elif isinstance(data, Buffer):
            pieces = (bytes(data),)
        else:
            pieces = (data,)
        for piece in pieces:
            self._views.append(memoryview(piece).cast("B"))

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes of the view."""
        while n > 0:
            if not self._views:
                raise IndexError("BufferListView::remove_prefix")
            front = self._views[0]
            if n < len(front):
                self._views[0] = front[n:]
                n = 0
            else:
                n -= len(front)
                self._views.popleft()

    def __len__(self) -> int:
        return sum(len(view) for view in self._views)

    def as_chunks(self) -> list[memoryview]:
        """Return the pieces, suitable for scatter-gather writes."""
        return list(self._views)