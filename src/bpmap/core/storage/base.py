"""
Storage adapter interface.

Adapters turn snapshots produced by ``EntityStore.export`` into durable
bytes and back. They never see the store itself.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

SnapshotDict = Dict[str, Any]


class StorageAdapter(ABC):
    """Persistence backend for model snapshots."""

    @abstractmethod
    def load(self) -> Optional[SnapshotDict]:
        """Return the latest saved snapshot, or None if nothing was saved yet."""

    @abstractmethod
    def save(self, snapshot: SnapshotDict) -> None:
        """Persist a snapshot, replacing the previous one as the latest."""

    @abstractmethod
    def exists(self) -> bool:
        """Whether a snapshot has been saved."""

    def describe(self) -> str:
        return self.__class__.__name__
