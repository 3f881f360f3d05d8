"""
JSON file storage adapter.

Stores the whole model as a single JSON document, the file-system
counterpart of keeping it in browser local storage.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from ..exceptions import StorageError
from .base import SnapshotDict, StorageAdapter

logger = logging.getLogger(__name__)


class JsonFileStorage(StorageAdapter):
    """
    Single-document JSON persistence.

    Writes go to a temporary file in the same directory first and are then
    moved over the target, so a crash never leaves half a document behind.
    """

    def __init__(self, path: Path, indent: int = 2):
        self.path = Path(path)
        self.indent = indent

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Optional[SnapshotDict]:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"Expected a JSON object in {self.path}")
        return data

    def save(self, snapshot: SnapshotDict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(snapshot, f, indent=self.indent)
            os.replace(tmp_name, self.path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise StorageError(f"Failed to write {self.path}: {e}") from e
        logger.debug("Saved snapshot to %s", self.path)

    def describe(self) -> str:
        return f"json:{self.path}"
