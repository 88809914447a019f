"""Adapters - I/O implementations of ports."""

from .file_store import FileKeyValueStore
from .memory_store import MemoryKeyValueStore

__all__ = [
    "FileKeyValueStore",
    "MemoryKeyValueStore",
]
