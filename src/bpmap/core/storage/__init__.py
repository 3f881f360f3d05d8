"""
Storage adapters for bpmap.

Provides pluggable persistence backends:
- JsonFileStorage: Single JSON document on disk
- SQLiteStorage: Revisioned snapshot documents in a local SQLite file
- MemoryStorage: Ephemeral storage for testing
"""

from pathlib import Path

from ...config import Settings, StorageBackend
from .base import StorageAdapter
from .json_file import JsonFileStorage
from .memory import MemoryStorage
from .sqlite import SQLiteStorage

__all__ = ["StorageAdapter", "JsonFileStorage", "SQLiteStorage", "MemoryStorage", "open_storage"]


def open_storage(settings: Settings, root: Path) -> StorageAdapter:
    """Build the adapter selected in the settings."""
    path = settings.storage.resolve_path(root)
    if settings.storage.backend == StorageBackend.SQLITE:
        return SQLiteStorage(path)
    return JsonFileStorage(path)
