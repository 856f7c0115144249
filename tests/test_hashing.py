from dataclasses import dataclass

import pytest

from xaeroflux.hashing import sha_256, sha_256_concat, sha_256_concat_hash


@dataclass
class _Node:
    node_hash: bytes


def test_sha_256_of_empty_input():
    assert sha_256(b"").hex() == (
        "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
    )


def test_sha_256_length():
    assert len(sha_256("XAERO")) == 32


def test_sha_256_str_and_bytes_agree():
    assert sha_256("XAERO") == sha_256(b"XAERO")


def test_sha_256_distinguishes_inputs():
    assert sha_256("XAERO") != sha_256("XAER0")


def test_concat_of_nodes_matches_concat_of_hashes():
    a, b = sha_256("XAERO"), sha_256("XAER1")
    assert sha_256_concat(_Node(a), _Node(b)) == sha_256_concat_hash(a, b)


def test_concat_hash_is_order_sensitive():
    a, b = sha_256("XAERO"), sha_256("XAER1")
    assert sha_256_concat_hash(a, b) != sha_256_concat_hash(b, a)


def test_concat_hash_equals_hash_of_joined_bytes():
    a, b = sha_256("left"), sha_256("right")
    assert sha_256_concat_hash(a, b) == sha_256(a + b)


def test_concat_with_zero_nodes():
    zero = bytes(32)
    result = sha_256_concat_hash(zero, zero)
    assert len(result) == 32
    assert result == sha_256(bytes(64))


@pytest.mark.parametrize("left,right", [(b"short", bytes(32)), (bytes(32), bytes(33))])
def test_concat_hash_rejects_wrong_length(left, right):
    with pytest.raises(ValueError):
        sha_256_concat_hash(left, right)