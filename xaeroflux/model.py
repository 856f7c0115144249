"""Engine-wide value types: modes, states, configuration and database keys."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from .hashing import HASH_SIZE

TIMESTAMP_SIZE = 8
ZERO_ID_SIZE = 32
KEY_SIZE = TIMESTAMP_SIZE + HASH_SIZE

_PHASES = frozenset({"running", "stopped", "shutdown"})


class EngineMode(enum.Enum):
    """The mode the engine runs in."""

    NORMAL = "normal"
    DEBUG = "debug"
    TEST = "test"
    PERFORMANCE_TESTING = "performance_testing"


@dataclass(frozen=True)
class EngineState:
    """Lifecycle phase of the engine ("running", "stopped" or "shutdown") and its mode."""

    phase: str
    mode: EngineMode

    def __post_init__(self) -> None:
        if self.phase not in _PHASES:
            raise ValueError(
                f"unknown engine phase {self.phase!r}; expected one of {sorted(_PHASES)}"
            )
        if not isinstance(self.mode, EngineMode):
            raise TypeError(f"mode must be an EngineMode, got {type(self.mode).__name__}")


def _fixed_bytes(value: bytes | bytearray | memoryview, size: int, name: str) -> bytes:
    value = bytes(value)
    if len(value) != size:
        raise ValueError(f"{name} must be {size} bytes, got {len(value)}")
    return value


@dataclass(frozen=True)
class FluxConfig:
    """Settings for one engine instance.

    ``root_zero_id`` identifies the root identity that can vouch for the user.
    """

    f_path: str
    io_threads: int
    cpu_threads: int
    max_connections: int
    peer_sync_interval: int
    root_zero_id: bytes

    def __post_init__(self) -> None:
        for name in ("io_threads", "cpu_threads", "max_connections", "peer_sync_interval"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"{name} must be a non-negative integer, got {value!r}")
        object.__setattr__(
            self, "root_zero_id", _fixed_bytes(self.root_zero_id, ZERO_ID_SIZE, "root_zero_id")
        )


@dataclass(frozen=True)
class FluxKey:
    """A database key: an 8-byte timestamp followed by a 32-byte event hash."""

    timestamp: bytes
    hash: bytes

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "timestamp", _fixed_bytes(self.timestamp, TIMESTAMP_SIZE, "timestamp")
        )
        object.__setattr__(self, "hash", _fixed_bytes(self.hash, HASH_SIZE, "hash"))

    def to_bytes(self) -> bytes:
        """Return the key as timestamp bytes followed by hash bytes."""
        return self.timestamp + self.hash

    @classmethod
    def from_bytes(cls, data: bytes | bytearray | memoryview) -> FluxKey:
        """Split a serialised key back into timestamp and hash."""
        raw = _fixed_bytes(data, KEY_SIZE, "key")
        return cls(timestamp=raw[:TIMESTAMP_SIZE], hash=raw[TIMESTAMP_SIZE:])