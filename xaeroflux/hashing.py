"""SHA-256 helpers used by the Merkle index."""

from __future__ import annotations

import hashlib
from typing import Protocol

HASH_SIZE = 32


class _HasNodeHash(Protocol):
    node_hash: bytes


def _as_bytes(data: bytes | bytearray | memoryview | str) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def _check_hash(value: bytes, name: str) -> bytes:
    value = bytes(value)
    if len(value) != HASH_SIZE:
        raise ValueError(f"{name} must be {HASH_SIZE} bytes, got {len(value)}")
    return value


def sha_256(data: bytes | bytearray | memoryview | str) -> bytes:
    """Return the SHA-256 digest of ``data``; strings are hashed as UTF-8."""
    return hashlib.sha256(_as_bytes(data)).digest()


def sha_256_concat_hash(left: bytes, right: bytes) -> bytes:
    """Return the SHA-256 digest of two 32-byte hashes laid end to end."""
    combined = _check_hash(left, "left") + _check_hash(right, "right")
    return hashlib.sha256(combined).digest()


def sha_256_concat(left: _HasNodeHash, right: _HasNodeHash) -> bytes:
    """Return the combined hash of two Merkle nodes."""
    return sha_256_concat_hash(left.node_hash, right.node_hash)