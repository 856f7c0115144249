"""Indexed key-value storage for raw event bytes."""

from __future__ import annotations

import abc
import os
import sqlite3
import threading
from pathlib import Path

DB_FILE_NAME = "storage.sqlite3"
_INDEX_BYTES = 8


class StorageError(Exception):
    """Raised when the backing store cannot be opened or used."""


class Storage(abc.ABC):
    """A store of byte strings addressed by non-negative integer index."""

    @abc.abstractmethod
    def init(self, path: str | os.PathLike[str]) -> None:
        """Open the store in the directory ``path``."""

    @abc.abstractmethod
    def get(self, index: int) -> bytes | None:
        """Return the bytes at ``index``, or None if nothing is stored there."""

    @abc.abstractmethod
    def put(self, index: int, data: bytes) -> None:
        """Store ``data`` at ``index``, replacing what was there."""

    @abc.abstractmethod
    def size(self) -> int:
        """Return the number of bytes of live data."""


def _index_key(index: int) -> bytes:
    if isinstance(index, bool) or not isinstance(index, int):
        raise TypeError(f"index must be an integer, got {type(index).__name__}")
    try:
        return index.to_bytes(_INDEX_BYTES, "big")
    except OverflowError:
        raise ValueError(f"index out of range: {index}") from None


class SqliteStorage(Storage):
    """Storage in an SQLite database file inside a directory.

    Indices are stored as 8-byte big-endian keys. The directory must exist.
    """

    def __init__(self, path: str | os.PathLike[str] | None = None) -> None:
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()
        if path is not None:
            self.init(path)

    def __enter__(self) -> SqliteStorage:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("storage is not initialized")
        return self._conn

    def init(self, path: str | os.PathLike[str]) -> None:
        directory = Path(path)
        if not directory.is_dir():
            raise StorageError(f"Failed to open database: {directory} is not a directory")
        try:
            conn = sqlite3.connect(directory / DB_FILE_NAME, check_same_thread=False)
            conn.execute(
                "CREATE TABLE IF NOT EXISTS events (key BLOB PRIMARY KEY, value BLOB NOT NULL)"
            )
            conn.commit()
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to open database: {exc}") from exc
        with self._lock:
            if self._conn is not None:
                self._conn.close()
            self._conn = conn

    def get(self, index: int) -> bytes | None:
        key = _index_key(index)
        with self._lock:
            try:
                row = self._connection().execute(
                    "SELECT value FROM events WHERE key = ?", (key,)
                ).fetchone()
            except sqlite3.Error as exc:
                raise StorageError(str(exc)) from exc
        return None if row is None else bytes(row[0])

    def put(self, index: int, data: bytes) -> None:
        key = _index_key(index)
        value = bytes(data)
        with self._lock:
            conn = self._connection()
            try:
                with conn:
                    conn.execute(
                        "INSERT OR REPLACE INTO events (key, value) VALUES (?, ?)", (key, value)
                    )
            except sqlite3.Error as exc:
                raise StorageError(str(exc)) from exc

    def size(self) -> int:
        with self._lock:
            try:
                (total,) = self._connection().execute(
                    "SELECT COALESCE(SUM(LENGTH(value)), 0) FROM events"
                ).fetchone()
            except sqlite3.Error as exc:
                raise StorageError(str(exc)) from exc
        return int(total)

    def close(self) -> None:
        """Close the database; it can be opened again with init()."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None