"""Reading the engine's TOML configuration and holding the active one."""

from __future__ import annotations

import logging
import os
import threading
import tomllib
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from importlib.metadata import PackageNotFoundError, version as _dist_version
from pathlib import Path
from typing import Any

from .logs import init_logging

CONFIG_ENV = "XAERO_CONFIG"
DEFAULT_CONFIG_PATH = "xaeroflux.toml"

_log = logging.getLogger(__name__)
_lock = threading.Lock()
_active: Config | None = None


@dataclass(frozen=True)
class StorageConfig:
    data_dir: Path
    wal_dir: Path
    merkle_index_dir: Path
    create_if_missing: bool
    max_open_files: int


@dataclass(frozen=True)
class MerkleConfig:
    page_size: int
    flush_interval_ms: int
    max_nodes_per_page: int


@dataclass(frozen=True)
class P2PConfig:
    listen_address: str
    bootstrap_nodes: list[str]
    enable_mdns: bool
    crdt_strategy: str
    max_msg_size_bytes: int


@dataclass(frozen=True)
class BufferConfig:
    capacity: int
    batch_size: int
    timeout_ms: int


@dataclass(frozen=True)
class ThreadConfig:
    num_worker_threads: int
    pin_threads: bool


@dataclass(frozen=True)
class LoggingConfig:
    level: str
    file: Path


def _string(value: Any, where: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{where}: expected a string, got {value!r}")
    return value


def _uint(value: Any, where: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{where}: expected a non-negative integer, got {value!r}")
    return value


def _bool(value: Any, where: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{where}: expected a boolean, got {value!r}")
    return value


def _path(value: Any, where: str) -> Path:
    return Path(_string(value, where))


def _strings(value: Any, where: str) -> list[str]:
    if not isinstance(value, list):
        raise ValueError(f"{where}: expected a list of strings, got {value!r}")
    return [_string(item, f"{where}[{n}]") for n, item in enumerate(value)]


_Converter = Callable[[Any, str], Any]

_SCHEMAS: dict[type, dict[str, _Converter]] = {
    StorageConfig: {
        "data_dir": _path,
        "wal_dir": _path,
        "merkle_index_dir": _path,
        "create_if_missing": _bool,
        "max_open_files": _uint,
    },
    MerkleConfig: {
        "page_size": _uint,
        "flush_interval_ms": _uint,
        "max_nodes_per_page": _uint,
    },
    P2PConfig: {
        "listen_address": _string,
        "bootstrap_nodes": _strings,
        "enable_mdns": _bool,
        "crdt_strategy": _string,
        "max_msg_size_bytes": _uint,
    },
    BufferConfig: {"capacity": _uint, "batch_size": _uint, "timeout_ms": _uint},
    ThreadConfig: {"num_worker_threads": _uint, "pin_threads": _bool},
    LoggingConfig: {"level": _string, "file": _path},
}


def _table(data: Any, where: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"{where}: expected a table, got {data!r}")
    return data


def _field(data: Mapping[str, Any], key: str, where: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise ValueError(f"{where}: missing field {key!r}") from None


def _section(cls: type, data: Any, where: str) -> Any:
    table = _table(data, where)
    values = {
        name: convert(_field(table, name, where), f"{where}.{name}")
        for name, convert in _SCHEMAS[cls].items()
    }
    return cls(**values)


@dataclass(frozen=True)
class Config:
    """The whole engine configuration."""

    name: str
    version: int
    description: str
    storage: StorageConfig
    merkle: MerkleConfig
    p2p: P2PConfig
    event_buffers: dict[str, BufferConfig] = field(default_factory=dict)
    threads: ThreadConfig | None = None
    logging: LoggingConfig | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Config:
        """Build a configuration from parsed TOML; raise ValueError if it is incomplete."""
        table = _table(data, "config")
        buffers = _table(_field(table, "event_buffers", "config"), "event_buffers")
        return cls(
            name=_string(_field(table, "name", "config"), "name"),
            version=_uint(_field(table, "version", "config"), "version"),
            description=_string(_field(table, "description", "config"), "description"),
            storage=_section(StorageConfig, _field(table, "storage", "config"), "storage"),
            merkle=_section(MerkleConfig, _field(table, "merkle", "config"), "merkle"),
            p2p=_section(P2PConfig, _field(table, "p2p", "config"), "p2p"),
            event_buffers={
                _string(key, "event_buffers"): _section(
                    BufferConfig, value, f"event_buffers.{key}"
                )
                for key, value in buffers.items()
            },
            threads=_section(ThreadConfig, _field(table, "threads", "config"), "threads"),
            logging=_section(LoggingConfig, _field(table, "logging", "config"), "logging"),
        )


def parse_config(text: str) -> Config:
    """Parse TOML text into a Config; raise ValueError on bad syntax or content."""
    return Config.from_dict(tomllib.loads(text))


def load_config(path: str | os.PathLike[str] | None = None) -> Config:
    """Read and parse a configuration file.

    Without ``path`` the file named by ``XAERO_CONFIG`` is read, or
    ``xaeroflux.toml`` when that variable is unset.
    """
    if path is None:
        path = os.environ.get(CONFIG_ENV, DEFAULT_CONFIG_PATH)
    return parse_config(Path(path).read_text(encoding="utf-8"))


def get_config() -> Config:
    """Return the configuration installed by initialize()."""
    with _lock:
        if _active is None:
            raise RuntimeError("configuration not initialized")
        return _active


def _package_version() -> str:
    try:
        return _dist_version("xaeroflux")
    except PackageNotFoundError:
        return "0.1.0"


def initialize(path: str | os.PathLike[str] | None = None) -> Config:
    """Set up logging, load the configuration and make it the active one."""
    global _active
    init_logging()
    _log.info("XaeroFlux initializing...")
    _log.info("XAER0FLUX v. %s", _package_version())
    config = load_config(path)
    with _lock:
        _active = config
    _log.info("XaeroFlux initialized")
    return config