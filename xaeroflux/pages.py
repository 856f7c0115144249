"""Fixed-size on-disk pages for the Merkle index, and storage file metadata."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

from .hashing import HASH_SIZE
from .merkle_tree import MerkleNode

PAGE_SIZE = 16_384
PAGE_MARKER = b"XAER"

_PAGE_HEADER = struct.Struct("<4sB7xQ")  # marker, event type, reserved, version
_NODE = struct.Struct("<32sB7x")  # hash, flags, padding

PAGE_HEADER_SIZE = _PAGE_HEADER.size
NODE_SIZE = _NODE.size
MAX_NODES_PER_PAGE = (PAGE_SIZE - PAGE_HEADER_SIZE) // NODE_SIZE

FLAG_PRESENT = 0x01
FLAG_LEAF = 0x02
_KNOWN_FLAGS = FLAG_PRESENT | FLAG_LEAF

_U8_MAX = 0xFF
_U32_MAX = 0xFFFF_FFFF
_U64_MAX = 0xFFFF_FFFF_FFFF_FFFF


def _check_uint(value: int, limit: int, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= limit:
        raise ValueError(f"{name} must be an integer in 0..{limit}, got {value!r}")


def _check_magic(magic: bytes | bytearray) -> bytes:
    magic = bytes(magic)
    if len(magic) != 4:
        raise ValueError(f"magic must be 4 bytes, got {len(magic)}")
    return magic


@dataclass(frozen=True)
class StorageHeader:
    """Magic number and format version at the start of a storage file."""

    magic: bytes
    version: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "magic", _check_magic(self.magic))
        _check_uint(self.version, _U32_MAX, "version")


@dataclass(frozen=True)
class StorageFooter:
    """Magic number and format version at the end of a storage file."""

    magic: bytes
    version: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "magic", _check_magic(self.magic))
        _check_uint(self.version, _U32_MAX, "version")


@dataclass(frozen=True)
class OnDiskNode:
    """A Merkle node as stored: a 32-byte hash, a flags byte and 7 bytes of padding."""

    hash: bytes
    flags: int = 0

    def __post_init__(self) -> None:
        value = bytes(self.hash)
        if len(value) != HASH_SIZE:
            raise ValueError(f"hash must be {HASH_SIZE} bytes, got {len(value)}")
        object.__setattr__(self, "hash", value)
        _check_uint(self.flags, _U8_MAX, "flags")

    def to_bytes(self) -> bytes:
        return _NODE.pack(self.hash, self.flags)

    @classmethod
    def from_bytes(cls, data: bytes | bytearray | memoryview) -> OnDiskNode:
        raw = bytes(data)
        if len(raw) != NODE_SIZE:
            raise ValueError(f"node must be {NODE_SIZE} bytes, got {len(raw)}")
        node_hash, flags = _NODE.unpack(raw)
        return cls(node_hash, flags)


@dataclass(frozen=True)
class PageHeader:
    """Page metadata: where leaves start, how many nodes, event type and version."""

    leaf_start: int
    total_nodes: int
    event_type: int
    version: int

    def __post_init__(self) -> None:
        _check_uint(self.leaf_start, _U64_MAX, "leaf_start")
        _check_uint(self.total_nodes, _U64_MAX, "total_nodes")
        _check_uint(self.event_type, _U8_MAX, "event_type")
        _check_uint(self.version, _U64_MAX, "version")


@dataclass
class MerklePage:
    """A decoded page of Merkle nodes; ``is_dirty`` is never persisted."""

    header: PageHeader
    nodes: list[MerkleNode] = field(default_factory=list)
    is_dirty: bool = False


def _to_disk(node: MerkleNode) -> OnDiskNode:
    flags = FLAG_PRESENT | (FLAG_LEAF if node.is_leaf else 0)
    return OnDiskNode(node.node_hash, flags)


def encode_page(page: MerklePage) -> bytes:
    """Serialise a page into exactly PAGE_SIZE bytes."""
    count = len(page.nodes)
    if count > MAX_NODES_PER_PAGE:
        raise ValueError(f"page holds at most {MAX_NODES_PER_PAGE} nodes, got {count}")
    if page.header.total_nodes != count:
        raise ValueError(
            f"header counts {page.header.total_nodes} nodes but page has {count}"
        )
    buffer = bytearray(PAGE_SIZE)
    _PAGE_HEADER.pack_into(buffer, 0, PAGE_MARKER, page.header.event_type, page.header.version)
    body = b"".join(_to_disk(node).to_bytes() for node in page.nodes)
    buffer[PAGE_HEADER_SIZE : PAGE_HEADER_SIZE + len(body)] = body
    return bytes(buffer)


def decode_page(data: bytes | bytearray | memoryview) -> MerklePage:
    """Parse a page written by encode_page; raise ValueError if it is corrupt."""
    raw = bytes(data)
    if len(raw) != PAGE_SIZE:
        raise ValueError(f"page must be {PAGE_SIZE} bytes, got {len(raw)}")
    marker, event_type, version = _PAGE_HEADER.unpack_from(raw)
    if marker != PAGE_MARKER:
        raise ValueError(f"bad page marker {marker!r}")

    area = raw[PAGE_HEADER_SIZE:]
    nodes: list[MerkleNode] = []
    for node_hash, flags in _NODE.iter_unpack(area[: MAX_NODES_PER_PAGE * NODE_SIZE]):
        if not flags & FLAG_PRESENT:
            break
        if flags & ~_KNOWN_FLAGS:
            raise ValueError(f"corrupt page: unknown node flags {flags:#04x}")
        nodes.append(MerkleNode(node_hash, bool(flags & FLAG_LEAF)))
    if any(area[len(nodes) * NODE_SIZE :]):
        raise ValueError("corrupt page: data after the last node")

    leaf_start = next((i for i, node in enumerate(nodes) if node.is_leaf), len(nodes))
    header = PageHeader(
        leaf_start=leaf_start,
        total_nodes=len(nodes),
        event_type=event_type,
        version=version,
    )
    return MerklePage(header=header, nodes=nodes, is_dirty=False)