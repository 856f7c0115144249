"""Experimental event store building blocks: write-ahead log, Merkle index, events and storage."""

__version__ = "0.1.0"