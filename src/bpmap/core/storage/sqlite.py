"""
SQLite storage adapter.

Document-store style persistence: every save appends a new revision of the
whole snapshot, and loading returns the latest one. Features:
- Schema versioning and migrations
- Connection handling via a context manager
- Revision history with pruning
"""

import json
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..exceptions import StorageError
from .base import SnapshotDict, StorageAdapter

SCHEMA_VERSION = 2


class SQLiteStorage(StorageAdapter):
    """
    Persistent snapshot revisions in a local SQLite file.

    Args:
        db_path: Database file; parent directories are created.
        keep_revisions: Number of revisions to retain, 0 for unlimited.
    """

    def __init__(self, db_path: Path, keep_revisions: int = 50):
        self.db_path = Path(db_path)
        self.keep_revisions = keep_revisions
        self._init_db()

    @contextmanager
    def _connection(self):
        """Context manager for database connections."""
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open {self.db_path}: {e}") from e
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_db(self) -> None:
        """Initialize database schema with versioning."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        with self._connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY,
                    applied_at TEXT NOT NULL,
                    description TEXT
                )
            """)

            current_version = self._get_schema_version_internal(conn)

            if current_version < SCHEMA_VERSION:
                self._migrate(conn, current_version)

    def _get_schema_version_internal(self, conn: sqlite3.Connection) -> int:
        row = conn.execute(
            "SELECT MAX(version) as v FROM schema_version"
        ).fetchone()
        return row["v"] if row and row["v"] else 0

    def _migrate(self, conn: sqlite3.Connection, from_version: int) -> None:
        """Run schema migrations."""

        if from_version < 1:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS snapshots (
                    revision INTEGER PRIMARY KEY AUTOINCREMENT,
                    saved_at TEXT NOT NULL,
                    document TEXT NOT NULL
                )
            """)
            conn.execute("""
                INSERT INTO schema_version (version, applied_at, description)
                VALUES (1, ?, 'Initial schema')
            """, (_now(),))

        if from_version < 2:
            conn.execute("ALTER TABLE snapshots ADD COLUMN entity_count INTEGER DEFAULT 0")
            conn.execute("""
                INSERT INTO schema_version (version, applied_at, description)
                VALUES (2, ?, 'Added entity count')
            """, (_now(),))

    def get_schema_version(self) -> int:
        with self._connection() as conn:
            return self._get_schema_version_internal(conn)

    def exists(self) -> bool:
        with self._connection() as conn:
            row = conn.execute("SELECT COUNT(*) AS n FROM snapshots").fetchone()
            return row["n"] > 0

    def load(self) -> Optional[SnapshotDict]:
        return self.load_revision(None)

    def load_revision(self, revision: Optional[int]) -> Optional[SnapshotDict]:
        """Load a specific revision, or the latest when revision is None."""
        with self._connection() as conn:
            if revision is None:
                row = conn.execute(
                    "SELECT document FROM snapshots ORDER BY revision DESC LIMIT 1"
                ).fetchone()
            else:
                row = conn.execute(
                    "SELECT document FROM snapshots WHERE revision = ?", (revision,)
                ).fetchone()

        if row is None:
            return None
        try:
            return json.loads(row["document"])
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt snapshot revision in {self.db_path}: {e}") from e

    def save(self, snapshot: SnapshotDict) -> None:
        with self._connection() as conn:
            conn.execute("""
                INSERT INTO snapshots (saved_at, document, entity_count)
                VALUES (?, ?, ?)
            """, (_now(), json.dumps(snapshot), _count_entities(snapshot)))

            if self.keep_revisions > 0:
                conn.execute("""
                    DELETE FROM snapshots WHERE revision NOT IN (
                        SELECT revision FROM snapshots ORDER BY revision DESC LIMIT ?
                    )
                """, (self.keep_revisions,))

    def revisions(self) -> List[Dict[str, Any]]:
        """Saved revisions, newest first."""
        with self._connection() as conn:
            rows = conn.execute("""
                SELECT revision, saved_at, entity_count FROM snapshots
                ORDER BY revision DESC
            """).fetchall()
        return [dict(row) for row in rows]

    def describe(self) -> str:
        return f"sqlite:{self.db_path}"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _count_entities(snapshot: SnapshotDict) -> int:
    processes = snapshot.get("processes", [])
    return (
        len(processes)
        + sum(len(p.get("subProcesses", [])) for p in processes)
        + len(snapshot.get("systems", []))
        + len(snapshot.get("vendors", []))
    )
