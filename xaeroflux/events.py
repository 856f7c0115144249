"""Events, their wire encoding and the bounded buffers that carry them."""

from __future__ import annotations

import enum
import threading
import time
from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import msgpack
from msgpack.exceptions import UnpackException

from .config import get_config

DEFAULT_CAPACITY = 100

T = TypeVar("T")


class EventType(enum.IntEnum):
    """The category of an event, stored as one byte."""

    APPLICATION = 0
    SYSTEM = 1
    NETWORK = 2
    STORAGE = 3

    @classmethod
    def from_int(cls, value: int) -> EventType:
        """Return the event type for ``value``; raise ValueError if there is none."""
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Invalid event type: {value!r}") from None


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


@dataclass
class Event(Generic[T]):
    """A typed event with its payload and creation time in epoch milliseconds."""

    event_type: EventType
    version: int
    data: T
    ts: int

    @classmethod
    def create(cls, data: T, event_type: int, version: int | None = None) -> Event[T]:
        """Create an event stamped now; the version defaults to the active config's."""
        if version is None:
            version = get_config().version
        return cls(
            event_type=EventType.from_int(event_type),
            version=version,
            data=data,
            ts=_now_ms(),
        )


@dataclass(frozen=True)
class RawEvent:
    """Undecoded event bytes."""

    data: bytes


def encode_event(event: Event[Any]) -> RawEvent:
    """Serialise an event; its payload must be msgpack-serialisable."""
    payload = [int(event.event_type), event.version, event.data, event.ts]
    return RawEvent(msgpack.packb(payload, use_bin_type=True))


def decode_event(raw: RawEvent | bytes | bytearray | memoryview) -> Event[Any]:
    """Parse bytes produced by encode_event; raise ValueError if they are not an event."""
    data = raw.data if isinstance(raw, RawEvent) else bytes(raw)
    try:
        fields = msgpack.unpackb(data, raw=False)
    except (ValueError, UnpackException) as exc:
        raise ValueError(f"cannot decode event: {exc}") from exc
    if not isinstance(fields, list) or len(fields) != 4:
        raise ValueError("cannot decode event: expected a four-field record")
    event_type, version, payload, ts = fields
    for name, value in (("event type", event_type), ("version", version), ("timestamp", ts)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"cannot decode event: {name} is not an integer")
    return Event(EventType.from_int(event_type), version, payload, ts)


class EventBuffer(Generic[T]):
    """A bounded, thread-safe FIFO channel.

    ``put`` blocks while the buffer is full; ``get`` blocks while it is empty.
    After ``close`` no more items are accepted, and readers receive what is
    left before ``get`` raises EOFError.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._items: deque[T] = deque()
        self._cond = threading.Condition()
        self._closed = False

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)

    def put(self, item: T, timeout: float | None = None) -> None:
        """Add an item, waiting for room; raise TimeoutError or RuntimeError if closed."""
        with self._cond:
            ready = self._cond.wait_for(
                lambda: self._closed or len(self._items) < self._capacity, timeout
            )
            if self._closed:
                raise RuntimeError("event buffer is closed")
            if not ready:
                raise TimeoutError("event buffer is full")
            self._items.append(item)
            self._cond.notify_all()

    def get(self, timeout: float | None = None) -> T:
        """Remove the oldest item, waiting for one; raise EOFError once closed and drained."""
        with self._cond:
            ready = self._cond.wait_for(lambda: self._items or self._closed, timeout)
            if self._items:
                item = self._items.popleft()
                self._cond.notify_all()
                return item
            if not ready:
                raise TimeoutError("event buffer is empty")
            raise EOFError("event buffer is closed")

    def close(self) -> None:
        """Stop accepting items and wake every waiting reader and writer."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                yield self.get()
            except EOFError:
                return