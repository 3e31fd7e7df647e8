"""Reference-counted file descriptors that track EOF and read/write counts."""

from __future__ import annotations

import os
import sys
from typing import Optional

from spongenet.buffer import BufferViewList

# Largest number of bytes taken by a single read.
_MAX_READ = 1024 * 1024


class _FDWrapper:
    """Owns a kernel file descriptor and closes it when no longer referenced."""

    def __init__(self, fd: int) -> None:
        if fd < 0:
            raise ValueError(f"invalid fd number:{fd}")
        self.fd = fd
        self.eof = False
        self.closed = False
        self.read_count = 0
        self.write_count = 0

    def close(self) -> None:
        os.close(self.fd)
        self.eof = True
        self.closed = True

    def __del__(self) -> None:
        if getattr(self, "closed", True):
            return
        try:
            self.close()
        except OSError as exc:
            print(f"Exception destructing FDWrapper: {exc}", file=sys.stderr)


def _view_of(data) -> BufferViewList:
    if isinstance(data, BufferViewList):
        # Take an independent view so the caller's object is left untouched.
        return BufferViewList(b"".join(bytes(chunk) for chunk in data.as_chunks()))
    return BufferViewList(data)


class FileDescriptor:
    """A shared handle to a file descriptor.

    Copies made with ``duplicate()`` share the descriptor, its EOF and closed
    flags and its read and write counts. The descriptor is closed when the
    last handle goes away, or explicitly with ``close()``.
    """

    def __init__(self, fd: "int | FileDescriptor") -> None:
        if isinstance(fd, FileDescriptor):
            self._internal = fd._internal
        else:
            self._internal = _FDWrapper(int(fd))

    def _register_read(self) -> None:
        self._internal.read_count += 1

    def _register_write(self) -> None:
        self._internal.write_count += 1

    def read(self, limit: Optional[int] = None) -> bytes:
        """Read up to ``limit`` bytes (at most 1 MiB); fewer may be returned."""
        size_to_read = _MAX_READ if limit is None else min(_MAX_READ, limit)
        data = os.read(self.fileno(), size_to_read)
        if size_to_read > 0 and not data:
            self._internal.eof = True
        if len(data) > size_to_read:
            raise RuntimeError("read() read more than requested")
        self._register_read()
        return data

    def write(self, data, write_all: bool = True) -> int:
        """Write bytes, a Buffer or a buffer list; return the number of bytes written.

        With ``write_all`` the call keeps writing until everything is written.
        """
        view = _view_of(data)
        total = 0
        while True:
            chunks = view.as_chunks()
            if chunks:
                written = os.writev(self.fileno(), chunks)
            else:
                written = os.write(self.fileno(), b"")
            remaining = len(view)
            if written == 0 and remaining:
                raise RuntimeError("write returned 0 given non-empty input buffer")
            if written > remaining:
                raise RuntimeError("write wrote more than length of input buffer")
            self._register_write()
            view.remove_prefix(written)
            total += written
            if not (write_all and len(view)):
                return total

    def close(self) -> None:
        """Close the underlying descriptor."""
        self._internal.close()

    def duplicate(self) -> "FileDescriptor":
        """Return another handle sharing this descriptor."""
        return FileDescriptor(self)

    def set_blocking(self, blocking: bool) -> None:
        """Put the descriptor into blocking or non-blocking mode."""
        os.set_blocking(self.fileno(), blocking)

    def fileno(self) -> int:
        return self._internal.fd

    def eof(self) -> bool:
        return self._internal.eof

    def closed(self) -> bool:
        return self._internal.closed

    def read_count(self) -> int:
        return self._internal.read_count

    def write_count(self) -> int:
        return self._internal.write_count

    def __enter__(self) -> "FileDescriptor":
        return self

    def __exit__(self, *args) -> None:
        if not self.closed():
            self.close()