import pytest

from xaeroflux.hashing import sha_256, sha_256_concat_hash
from xaeroflux.merkle_tree import MerkleProof, MerkleTree, ProofSegment


def _leaves(*names):
    return [sha_256(name) for name in names]


@pytest.fixture
def four_leaf_tree():
    return MerkleTree.build(_leaves("XAERO", "XAER0", "XAER1", "XAER2"))


def test_empty_tree():
    tree = MerkleTree.build([])
    assert len(tree.nodes) == 0
    assert tree.root_hash == bytes(32)
    assert tree.root() == bytes(32)


def test_single_node_tree():
    tree = MerkleTree.build(_leaves("XAERO"))
    assert len(tree.nodes) == 3


def test_insert_leaves(four_leaf_tree):
    assert len(four_leaf_tree.nodes) == 7
    assert four_leaf_tree.leaf_start == 3
    assert four_leaf_tree.total_size == 7


def test_verify_proof_no_data(four_leaf_tree):
    data_to_prove = sha_256("XAER0")
    proof = four_leaf_tree.generate_proof(data_to_prove)
    other = MerkleTree.build(_leaves("XAER3", "XAER4", "XAER5", "XAER6"))
    assert proof is not None
    assert not other.verify_proof(proof, data_to_prove)


def test_generate_proof(four_leaf_tree):
    data_to_prove = sha_256("XAER0")
    proof = four_leaf_tree.generate_proof(data_to_prove)
    assert proof is not None
    assert four_leaf_tree.verify_proof(proof, data_to_prove)
    assert four_leaf_tree.generate_proof(sha_256("XAER3")) is None
    proof2 = four_leaf_tree.generate_proof(sha_256("XAER2"))
    assert proof2 is not None
    assert four_leaf_tree.verify_proof(proof2, sha_256("XAER2"))


def test_generate_proof_no_data(four_leaf_tree):
    assert four_leaf_tree.generate_proof(sha_256("XAER3")) is None


def test_proof_length_for_four_leaves(four_leaf_tree):
    proof = four_leaf_tree.generate_proof(sha_256("XAERO"))
    assert len(proof) == 2
    assert proof.segments[0] == ProofSegment(sha_256("XAER0"), False)


def test_two_leaf_root_is_hash_of_children():
    a, b = _leaves("a", "b")
    tree = MerkleTree.build([a, b])
    assert tree.root() == sha_256_concat_hash(a, b)


def test_single_leaf_is_paired_with_itself():
    (a,) = _leaves("only")
    tree = MerkleTree.build([a])
    assert tree.root() == sha_256_concat_hash(a, a)
    proof = tree.generate_proof(a)
    assert list(proof) == [ProofSegment(a, False)]
    assert tree.verify_proof(proof, a)


def test_odd_leaf_count_duplicates_last():
    tree = MerkleTree.build(_leaves("a", "b", "c"))
    assert len(tree.nodes) == 7
    leaves = [n.node_hash for n in tree.nodes[tree.leaf_start:]]
    assert leaves[-1] == leaves[-2] == sha_256("c")
    assert all(n.is_leaf for n in tree.nodes[tree.leaf_start:])
    assert not any(n.is_leaf for n in tree.nodes[: tree.leaf_start])


@pytest.mark.parametrize("count", range(1, 10))
def test_every_leaf_proof_verifies(count):
    names = [f"leaf-{i}" for i in range(count)]
    tree = MerkleTree.build(_leaves(*names))
    for leaf in _leaves(*names):
        proof = tree.generate_proof(leaf)
        assert proof is not None
        assert tree.verify_proof(proof, leaf)


def test_tampered_proof_fails(four_leaf_tree):
    leaf = sha_256("XAER1")
    proof = four_leaf_tree.generate_proof(leaf)
    first = proof.segments[0]
    tampered = MerkleProof(
        [ProofSegment(sha_256("forged"), first.is_left), *proof.segments[1:]]
    )
    assert not four_leaf_tree.verify_proof(tampered, leaf)


def test_wrong_data_fails_verification(four_leaf_tree):
    proof = four_leaf_tree.generate_proof(sha_256("XAER1"))
    assert not four_leaf_tree.verify_proof(proof, sha_256("XAER2"))


def test_build_rejects_short_leaf():
    with pytest.raises(ValueError):
        MerkleTree.build([b"too short"])


def test_same_leaves_give_same_root():
    first = MerkleTree.build(_leaves("x", "y", "z"))
    second = MerkleTree.build(_leaves("x", "y", "z"))
    assert first.root() == second.root()
    assert first.root() != MerkleTree.build(_leaves("z", "y", "x")).root()