# xaeroflux

An experimental event store library. It provides:

- a memory-mapped **write-ahead log** (`xaeroflux.wal.Wal`),
- a **Merkle tree** with inclusion proofs (`xaeroflux.merkle_tree.MerkleTree`) and SHA-256 helpers (`xaeroflux.hashing`),
- typed **events**, their binary encoding and bounded thread-safe buffers (`xaeroflux.events`),
- a background **producer** that decodes raw events into typed ones (`xaeroflux.producer`),
- a key/value **storage** backend addressed by integer index (`xaeroflux.storage.SqliteStorage`),
- fixed-size on-disk **pages** for Merkle nodes (`xaeroflux.pages`),
- TOML **configuration** (`xaeroflux.config`), engine value types (`xaeroflux.model`),
  diagnostics and probe records (`xaeroflux.diagnostics`) and logging set-up (`xaeroflux.logs`).

The project is at an early stage. Formats and interfaces may change.

## Installation

```
pip install xaeroflux
```

To run the test suite:

```
pip install "xaeroflux[test]"
pytest
```

## Merkle proofs

```python
from xaeroflux.hashing import sha_256
from xaeroflux.merkle_tree import MerkleTree

leaves = [sha_256(name) for name in ("alpha", "beta", "gamma", "delta")]
tree = MerkleTree.build(leaves)

proof = tree.generate_proof(sha_256("beta"))
assert proof is not None
assert tree.verify_proof(proof, sha_256("beta"))

# Data that is not a leaf has no proof.
assert tree.generate_proof(sha_256("omega")) is None
```

Leaves must be 32-byte hashes. A tree built from an odd number of leaves
repeats the last leaf. An empty tree has an all-zero root.

## Write-ahead log

```python
from xaeroflux.wal import Wal

with Wal("events.wal") as wal:
    wal.write(b"first")
    wal.write(b"second")
    assert wal.read() == b"firstsecond"

    wal.flush()
    wal.truncate()      # start again from the beginning
    assert wal.read() == b""
```

The file is set to a fixed size (`FILE_SIZE`, 1 MiB by default) and mapped
into memory; data is copied in page-sized chunks. A write that does not fit
in the space left raises `ValueError`.

## Events

```python
from xaeroflux.events import Event, EventType, decode_event, encode_event

kind = EventType.from_int(0)          # EventType.APPLICATION
event = Event.create(b"payload", 0, 1)
raw = encode_event(event)
assert decode_event(raw) == event
```

Event type codes are `0` (application), `1` (system), `2` (network) and
`3` (storage); any other code raises `ValueError`. When `Event.create` is
given no version, it takes the version of the active configuration (see
below). Payloads must be serialisable with msgpack.

`EventBuffer` is a bounded FIFO (capacity 100 by default): `put` waits for
room, `get` waits for an item, and after `close` readers drain what is left
before `get` raises `EOFError`.

## Producer

```python
from xaeroflux.events import Event, EventBuffer, encode_event
from xaeroflux.producer import Producer, RawEventDecoder

raw_buffer = EventBuffer()
decoded = EventBuffer()
producer = Producer(decoded, raw_buffer, RawEventDecoder())
producer.spin_wait()

raw_buffer.put(encode_event(Event.create("hello", 1, 1)))
print(decoded.get(timeout=1).data)    # "hello"
producer.stop()
```

Buffers that fail to decode are logged and dropped.

## Storage

```python
import os
from xaeroflux.storage import SqliteStorage

os.makedirs("store", exist_ok=True)
with SqliteStorage("store") as store:
    store.put(0, b"hello")
    assert store.get(0) == b"hello"
    assert store.get(1) is None
    print(store.size())               # bytes of stored data
```

`init` takes an existing directory and keeps the data in
`storage.sqlite3` inside it; otherwise it raises `StorageError`.

## Merkle pages

`encode_page` turns a `MerklePage` into exactly `PAGE_SIZE` (16384) bytes:
a header with the `b"XAER"` marker, event type and version, followed by
40-byte node records. `decode_page` reads such a page back and raises
`ValueError` on a wrong size, a bad marker or corrupt node data.

## Configuration

Settings are read from a TOML file. `parse_config` parses a string and
`load_config` reads a file — by default the one named by the `XAERO_CONFIG`
environment variable, or `xaeroflux.toml`. `initialize` sets up logging,
loads the configuration and makes it the active one, which `get_config`
then returns. Every field below is required; a missing or mistyped one
raises `ValueError`.

```toml
name = "xaeroflux"
version = 1
description = "local event store"

[storage]
data_dir = "data"
wal_dir = "wal"
merkle_index_dir = "merkle"
create_if_missing = true
max_open_files = 256

[merkle]
page_size = 16384
flush_interval_ms = 1000
max_nodes_per_page = 400

[p2p]
listen_address = "/ip4/127.0.0.1/tcp/4001"
bootstrap_nodes = []
enable_mdns = false
crdt_strategy = "lww"
max_msg_size_bytes = 65536

[event_buffers.default]
capacity = 100
batch_size = 10
timeout_ms = 50

[threads]
num_worker_threads = 4
pin_threads = false

[logging]
level = "info"
file = "xaeroflux.log"
```

```python
from xaeroflux.config import load_config

config = load_config("xaeroflux.toml")
print(config.name, config.version)
```

## What the package does not do

These are building blocks only. There is no command-line program, no
server, and no single database object tying the log, index and storage
together (no range queries over time or appending keyed events). The
`p2p` settings are parsed but nothing uses them: there is no peer-to-peer
networking or synchronisation. Merkle pages can be encoded and decoded,
but there is no page cache or index file that reads and writes them.