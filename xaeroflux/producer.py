"""Turning raw event bytes into decoded events on a background thread."""

from __future__ import annotations

import abc
import logging
import threading
from typing import Any, Generic, TypeVar

from .events import Event, EventBuffer, RawEvent, decode_event

_log = logging.getLogger(__name__)

T = TypeVar("T")

_PUT_POLL_SECONDS = 0.1


class EventDecoder(abc.ABC, Generic[T]):
    """Parses a raw buffer into an event."""

    @abc.abstractmethod
    def decode(self, raw_buffer: bytes) -> Event[T]:
        """Return the event held in ``raw_buffer``; raise ValueError if there is none."""


class RawEventDecoder(EventDecoder[Any]):
    """Decodes buffers written by ``encode_event``."""

    def decode(self, raw_buffer: bytes) -> Event[Any]:
        return decode_event(raw_buffer)


class Producer(Generic[T]):
    """Moves events from a raw buffer to a decoded buffer through a decoder.

    Buffers that cannot be decoded, and events the decoded buffer refuses,
    are logged and dropped.
    """

    def __init__(
        self,
        event_buffer: EventBuffer[Event[T]],
        raw_event_buffer: EventBuffer[RawEvent],
        decoder: EventDecoder[T],
    ) -> None:
        self.event_buffer = event_buffer
        self.raw_event_buffer = raw_event_buffer
        self.decoder = decoder
        self._thread: threading.Thread | None = None
        self._stopping = threading.Event()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def spin_wait(self) -> threading.Thread:
        """Start the background thread and return it."""
        if self.running:
            raise RuntimeError("producer is already running")
        self._stopping.clear()
        thread = threading.Thread(target=self._run, name="xaeroflux-producer", daemon=True)
        self._thread = thread
        thread.start()
        return thread

    def stop(self) -> None:
        """Close the raw buffer and wait for the thread to finish what is queued."""
        self.raw_event_buffer.close()
        self._stopping.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def _run(self) -> None:
        for raw in self.raw_event_buffer:
            try:
                event = self.decoder.decode(raw.data)
            except Exception as exc:  # a decoder may fail in any way
                _log.warning("Failed to decode event: %s", exc)
                continue
            if self._deliver(event):
                _log.debug("Event sent successfully")

    def _deliver(self, event: Event[T]) -> bool:
        while True:
            try:
                self.event_buffer.put(event, timeout=_PUT_POLL_SECONDS)
                return True
            except TimeoutError:
                if self._stopping.is_set():
                    _log.warning("Failed to send event: producer stopped")
                    return False
            except RuntimeError as exc:
                _log.warning("Failed to send event: %s", exc)
                return False