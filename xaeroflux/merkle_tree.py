"""An array-backed Merkle tree with inclusion proofs."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from .hashing import HASH_SIZE, sha_256_concat_hash
from .logs import TRACE, init_logging

_log = logging.getLogger(__name__)

ZERO_HASH = bytes(HASH_SIZE)


@dataclass
class MerkleNode:
    """A node of the tree: its hash and whether it is a leaf."""

    node_hash: bytes = ZERO_HASH
    is_leaf: bool = False

    def __repr__(self) -> str:
        return f"MerkleNode(node_hash={self.node_hash.hex()}, is_leaf={self.is_leaf})"


@dataclass(frozen=True)
class ProofSegment:
    """A sibling hash on the path to the root, and which side it sits on."""

    node_hash: bytes
    is_left: bool

    def __repr__(self) -> str:
        return f"ProofSegment(node_hash={self.node_hash.hex()}, is_left={self.is_left})"


@dataclass
class MerkleProof:
    """The sibling hashes from a leaf up to the root, leaf side first."""

    segments: list[ProofSegment] = field(default_factory=list)

    def __iter__(self) -> Iterator[ProofSegment]:
        return iter(self.segments)

    def __len__(self) -> int:
        return len(self.segments)

    def __repr__(self) -> str:
        return f"MerkleProof(segments={[s.node_hash.hex() for s in self.segments]})"


@dataclass
class MerkleTree:
    """A complete binary tree stored as an array, leaves at the end."""

    root_hash: bytes = ZERO_HASH
    nodes: list[MerkleNode] = field(default_factory=list)
    leaf_start: int = 0
    total_size: int = 0

    def __repr__(self) -> str:
        return (
            f"MerkleTree(root_hash={self.root_hash.hex()}, "
            f"nodes={[n.node_hash.hex() for n in self.nodes]})"
        )

    @classmethod
    def build(cls, leaves: Iterable[bytes]) -> MerkleTree:
        """Build a tree over 32-byte leaf hashes.

        An odd number of leaves is made even by repeating the last one.
        An empty input gives an empty tree with an all-zero root.
        """
        init_logging()
        data = [bytes(leaf) for leaf in leaves]
        for leaf in data:
            if len(leaf) != HASH_SIZE:
                raise ValueError(f"leaf must be {HASH_SIZE} bytes, got {len(leaf)}")
        if not data:
            return cls()

        if len(data) % 2:
            data.append(data[-1])
            _log.log(TRACE, "Added dummy node: %s", data[-1].hex())

        leaf_count = len(data)
        tree_size = 2 * leaf_count - 1
        leaf_start = tree_size - leaf_count
        _log.log(TRACE, "building tree of size %d with %d leaves", tree_size, leaf_count)

        nodes = [MerkleNode() for _ in range(leaf_start)]
        nodes.extend(MerkleNode(leaf, True) for leaf in data)
        for i in reversed(range(leaf_start)):
            combined = sha_256_concat_hash(nodes[2 * i + 1].node_hash, nodes[2 * i + 2].node_hash)
            nodes[i] = MerkleNode(combined, False)

        tree = cls(
            root_hash=nodes[0].node_hash,
            nodes=nodes,
            leaf_start=leaf_start,
            total_size=tree_size,
        )
        _log.log(TRACE, "Root hash: %s", tree.root_hash.hex())
        return tree

    def root(self) -> bytes:
        """Return the root hash."""
        return self.root_hash

    def generate_proof(self, data: bytes) -> MerkleProof | None:
        """Return the proof that ``data`` is a leaf, or None if it is not."""
        data = bytes(data)
        index = next(
            (
                self.leaf_start + offset
                for offset, node in enumerate(self.nodes[self.leaf_start:])
                if node.node_hash == data
            ),
            None,
        )
        if index is None:
            _log.warning("Data not found in tree")
            return None

        _log.log(TRACE, "Found node at index %d", index)
        segments = []
        while index > 0:
            if index % 2 == 0:
                segments.append(ProofSegment(self.nodes[index - 1].node_hash, True))
            else:
                segments.append(ProofSegment(self.nodes[index + 1].node_hash, False))
            index = (index - 1) // 2
        proof = MerkleProof(segments)
        _log.log(TRACE, "generated proof: %r", proof)
        return proof

    def verify_proof(self, proof: MerkleProof, data: bytes) -> bool:
        """Return True if ``proof`` leads from ``data`` to this tree's root."""
        running = bytes(data)
        for segment in proof:
            if segment.is_left:
                running = sha_256_concat_hash(segment.node_hash, running)
            else:
                running = sha_256_concat_hash(running, segment.node_hash)
        _log.log(TRACE, "verify_proof computed root: %s", running.hex())
        return running == self.root_hash