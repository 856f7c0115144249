import pytest

from xaeroflux.hashing import sha_256
from xaeroflux.merkle_tree import MerkleNode, MerkleTree
from xaeroflux.pages import (
    MAX_NODES_PER_PAGE,
    NODE_SIZE,
    PAGE_HEADER_SIZE,
    PAGE_SIZE,
    MerklePage,
    OnDiskNode,
    PageHeader,
    StorageFooter,
    StorageHeader,
    decode_page,
    encode_page,
)


def _tree_page(event_type=1, version=7):
    tree = MerkleTree.build([sha_256("XAERO"), sha_256("XAER0"), sha_256("XAER1")])
    header = PageHeader(tree.leaf_start, len(tree.nodes), event_type, version)
    return MerklePage(header, list(tree.nodes))


def test_format_sizes():
    assert PAGE_HEADER_SIZE == 4 + 1 + 7 + 8
    assert len(OnDiskNode(bytes(32)).to_bytes()) == NODE_SIZE == 32 + 1 + 7
    nodes = [MerkleNode(sha_256(str(n)), True) for n in range(MAX_NODES_PER_PAGE)]
    raw = encode_page(MerklePage(PageHeader(0, len(nodes), 0, 0), nodes))
    assert len(raw) == PAGE_SIZE == 16_384
    assert PAGE_HEADER_SIZE + MAX_NODES_PER_PAGE * NODE_SIZE <= len(raw)


def test_on_disk_node_round_trip():
    node = OnDiskNode(sha_256("node"), 3)
    raw = node.to_bytes()
    assert len(raw) == NODE_SIZE
    assert raw[:32] == sha_256("node")
    assert raw[32] == 3
    assert raw[33:] == bytes(7)
    assert OnDiskNode.from_bytes(raw) == node


def test_on_disk_node_validation():
    with pytest.raises(ValueError):
        OnDiskNode(b"short")
    with pytest.raises(ValueError):
        OnDiskNode(bytes(32), 256)
    with pytest.raises(ValueError):
        OnDiskNode.from_bytes(bytes(NODE_SIZE - 1))


def test_page_round_trip():
    page = _tree_page()
    raw = encode_page(page)
    assert len(raw) == PAGE_SIZE
    assert raw[:4] == b"XAER"
    assert decode_page(raw) == page


def test_decoded_page_is_clean():
    page = _tree_page()
    page.is_dirty = True
    decoded = decode_page(encode_page(page))
    assert decoded.is_dirty is False
    assert decoded.nodes == page.nodes
    assert decoded.header == page.header


def test_empty_page_round_trip():
    page = MerklePage(PageHeader(0, 0, 2, 1))
    assert decode_page(encode_page(page)) == page


def test_full_page_round_trip():
    nodes = [MerkleNode(sha_256(str(n)), True) for n in range(MAX_NODES_PER_PAGE)]
    page = MerklePage(PageHeader(0, len(nodes), 0, 5), nodes)
    assert decode_page(encode_page(page)) == page


def test_too_many_nodes():
    nodes = [MerkleNode(sha_256(str(n)), True) for n in range(MAX_NODES_PER_PAGE + 1)]
    with pytest.raises(ValueError):
        encode_page(MerklePage(PageHeader(0, len(nodes), 0, 0), nodes))


def test_node_count_mismatch():
    page = _tree_page()
    page.nodes.pop()
    with pytest.raises(ValueError):
        encode_page(page)


def test_bad_marker():
    raw = bytearray(encode_page(_tree_page()))
    raw[:4] = b"XXXX"
    with pytest.raises(ValueError):
        decode_page(bytes(raw))


def test_wrong_length():
    with pytest.raises(ValueError):
        decode_page(encode_page(_tree_page())[:-1])


def test_corrupt_trailing_bytes():
    raw = bytearray(encode_page(_tree_page()))
    raw[-1] = 1
    with pytest.raises(ValueError):
        decode_page(bytes(raw))


def test_page_header_validation():
    with pytest.raises(ValueError):
        PageHeader(0, 0, 256, 0)
    with pytest.raises(ValueError):
        PageHeader(-1, 0, 0, 0)


def test_storage_header_and_footer():
    header = StorageHeader(bytearray(b"XAER"), 1)
    footer = StorageFooter(b"XAER", 1)
    assert header.magic == b"XAER"
    assert footer.magic == header.magic
    with pytest.raises(ValueError):
        StorageHeader(b"XAERO", 1)
    with pytest.raises(ValueError):
        StorageFooter(b"XAER", 2**32)