"""
In-memory storage adapter.

Keeps a deep copy of the last snapshot; useful for tests and for hosts
that handle durability themselves.
"""

import copy
from typing import Optional

from .base import SnapshotDict, StorageAdapter


class MemoryStorage(StorageAdapter):

    def __init__(self, snapshot: Optional[SnapshotDict] = None):
        self._snapshot = copy.deepcopy(snapshot)

    def load(self) -> Optional[SnapshotDict]:
        return copy.deepcopy(self._snapshot)

    def save(self, snapshot: SnapshotDict) -> None:
        self._snapshot = copy.deepcopy(snapshot)

    def exists(self) -> bool:
        return self._snapshot is not None
