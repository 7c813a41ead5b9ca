"""Memory mapped access to a whole file."""

import mmap
import os
import sys


class MappedFile:
    """Maps a whole, non-empty file into memory, read-only or writable."""

    def __init__(self, filename, readonly=False):
        file_size = os.path.getsize(filename)
        if file_size == 0:
            raise ValueError("file empty")
        if file_size > sys.maxsize:
            raise ValueError("file too large")
        self._size = file_size

        flags = os.O_RDONLY if readonly else os.O_RDWR
        flags |= getattr(os, "O_BINARY", 0)
        try:
            fd = os.open(filename, flags)
        except OSError as exc:
            raise OSError("failed to open file") from exc

        access = mmap.ACCESS_READ if readonly else mmap.ACCESS_WRITE
        try:
            self._map = mmap.mmap(fd, file_size, access=access)
        except (OSError, ValueError) as exc:
            raise OSError("failed to memmap file") from exc
        finally:
            os.close(fd)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        """Flush and unmap the file."""
        if self._map is not None:
            if not self._map.closed:
                self._map.close()
            self._map = None

    @property
    def buffer(self):
        """The mapped memory."""
        if self._map is None:
            raise ValueError("file is closed")
        return self._map

    @property
    def size(self):
        """Size of the mapped file in bytes."""
        return self._size

    def __del__(self):
        if getattr(self, "_map", None) is not None:
            try:
                self.close()
            except BufferError:
                pass