"""Diagnostic snapshots of the engine's subsystems, and probe records."""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass, field

PROBE_PAGE_SIZE = 1024 * 16


@dataclass
class NetworkDiagnostics:
    """State of the network sync subsystem."""

    connected_peers: int
    bandwidth_bytes_per_sec: int
    last_sync_peer: str | None = None


@dataclass
class SourceDeviceDiagnostics:
    """Resources of the hosting device."""

    cpu_cores: int
    active_threads: int
    memory_usage_bytes: int
    disk_free_bytes: int


@dataclass
class MerkleIndexDiagnostics:
    """Latencies (milliseconds) and counters of the Merkle index."""

    indexing_latency_ms: int
    flush_latency_ms: int
    page_write_latency_ms: int
    proofs_generated: int
    last_proof_verified: int | None = None


@dataclass
class StorageDiagnostics:
    """Write latency (milliseconds) and batch count of the key-value store."""

    storage_latency_ms: int
    write_batches: int


@dataclass
class WalDiagnostics:
    """Write and flush latencies (milliseconds) of the write-ahead log."""

    wal_write_latency_ms: int
    wal_flush_latency_ms: int


@dataclass
class Diagnostics:
    """All subsystem diagnostics together."""

    network: NetworkDiagnostics
    source_device: SourceDeviceDiagnostics
    merkle_index: MerkleIndexDiagnostics
    storage: StorageDiagnostics
    wal: WalDiagnostics


class ProbeType(enum.Enum):
    PERFORMANCE = "performance"
    SECURITY = "security"
    DIAGNOSTICS = "diagnostics"


@dataclass
class ProbeData:
    """A page-sized sample buffer, versioned by its creation time in epoch seconds."""

    data: bytearray = field(default_factory=lambda: bytearray(PROBE_PAGE_SIZE))
    version: int = field(default_factory=lambda: int(time.time()))


@dataclass
class Probe:
    """A probe and the samples it has collected."""

    probe_type: ProbeType
    probe_id: int
    probe_data: list[ProbeData] = field(default_factory=list)