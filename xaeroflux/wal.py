"""A write-ahead log kept in a memory-mapped file."""

from __future__ import annotations

import mmap
import os
from types import TracebackType

FILE_SIZE = 1024 * 1024
"""Size every log file is set to when it is mapped."""


def page_size() -> int:
    """Return the operating system's memory page size in bytes."""
    return mmap.PAGESIZE


def map_file(path: str | os.PathLike[str], size: int = FILE_SIZE) -> mmap.mmap:
    """Open or create ``path``, set its length to ``size`` and map it read-write.

    Existing contents are kept up to ``size`` bytes.
    """
    if size < 1:
        raise ValueError("size must be at least 1")
    fd = os.open(os.fspath(path), os.O_RDWR | os.O_CREAT | getattr(os, "O_BINARY", 0), 0o644)
    try:
        os.ftruncate(fd, size)
        return mmap.mmap(fd, size, access=mmap.ACCESS_WRITE)
    finally:
        os.close(fd)


class Wal:
    """An append-only log over a fixed-size memory-mapped file.

    Writes go to the mapping at ``offset``, which then advances; ``read``
    returns everything written since the log was opened or truncated.
    """

    def __init__(self, path: str | os.PathLike[str], size: int = FILE_SIZE) -> None:
        self.path = os.fspath(path)
        self._mmap: mmap.mmap | None = map_file(path, size)
        self.offset = 0
        self.page_size = page_size()

    def __enter__(self) -> Wal:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._mmap is None

    @property
    def capacity(self) -> int:
        """Total number of bytes the log can hold."""
        return len(self._mapping())

    def _mapping(self) -> mmap.mmap:
        if self._mmap is None:
            raise ValueError("write-ahead log is closed")
        return self._mmap

    def write(self, raw_buffer: bytes | bytearray | memoryview) -> None:
        """Append ``raw_buffer``, copying at most one page at a time.

        Raises ValueError if the data does not fit in what is left of the file.
        """
        mapping = self._mapping()
        data = memoryview(raw_buffer).cast("B")
        end = self.offset + len(data)
        if end > len(mapping):
            raise ValueError(
                f"write of {len(data)} bytes at offset {self.offset} "
                f"exceeds log size {len(mapping)}"
            )
        for start in range(0, len(data), self.page_size):
            chunk = data[start : start + self.page_size]
            mapping[self.offset : self.offset + len(chunk)] = chunk
            self.offset += len(chunk)
        if self.offset == len(mapping):
            mapping.flush()

    def read(self) -> bytes:
        """Return the bytes written so far."""
        return bytes(self._mapping()[: self.offset])

    def flush(self) -> None:
        """Write the mapped pages back to the file."""
        self._mapping().flush()

    def sync(self) -> None:
        """Write the mapped pages back to the file."""
        self._mapping().flush()

    def close(self) -> None:
        """Flush and release the mapping; closing twice is harmless."""
        if self._mmap is None:
            return
        self._mmap.flush()
        self._mmap.close()
        self._mmap = None

    def truncate(self) -> None:
        """Flush, then start writing again from the beginning."""
        self._mapping().flush()
        self.offset = 0