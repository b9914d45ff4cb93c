# src/goosereview/cache/sqlite_store.py — v1
"""SQLite-based insight store (GOOSE_INSIGHT_BACKEND=sqlite).

Uses stdlib sqlite3 — no external dependency. Every upsert is a single
INSERT OR REPLACE committed in its own transaction.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from pydantic import ValidationError

from goosereview.cache.base_insight_store import BaseInsightStore, CacheWriteError
from goosereview.cache.models import InsightRecord, InsightStats

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS insights (
    file_path TEXT PRIMARY KEY,
    code_hash TEXT NOT NULL,
    data TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""


class SqliteInsightStore(BaseInsightStore):
    """SQLite-backed insight store for large projects."""

    def __init__(self, db_path: Path | str) -> None:
        super().__init__()
        self._db_path = Path(db_path).expanduser()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    async def get(self, file_path: str) -> InsightRecord | None:
        """Retrieve a record by path."""
        cursor = self._conn.execute(
            "SELECT data FROM insights WHERE file_path = ?", (file_path,)
        )
        row = cursor.fetchone()
        if row is None:
            return None
        return self._decode(file_path, row[0])

    async def _put(self, record: InsightRecord) -> None:
        try:
            with self._conn:
                self._conn.execute(
                    """INSERT OR REPLACE INTO insights
                       (file_path, code_hash, data, updated_at)
                       VALUES (?, ?, ?, ?)""",
                    (
                        record.file_path,
                        record.code_hash,
                        record.model_dump_json(by_alias=True),
                        record.timestamp.isoformat(),
                    ),
                )
        except sqlite3.Error as e:
            raise CacheWriteError(record.file_path, str(e)) from e

    async def load_all(self) -> dict[str, InsightRecord]:
        cursor = self._conn.execute("SELECT file_path, data FROM insights ORDER BY file_path")
        records: dict[str, InsightRecord] = {}
        for file_path, data in cursor.fetchall():
            record = self._decode(file_path, data)
            if record is not None:
                records[file_path] = record
        return records

    async def delete(self, file_path: str) -> bool:
        async with self.path_lock(file_path):
            with self._conn:
                cursor = self._conn.execute(
                    "DELETE FROM insights WHERE file_path = ?", (file_path,)
                )
            return cursor.rowcount > 0

    async def clear(self) -> None:
        with self._conn:
            self._conn.execute("DELETE FROM insights")

    async def stats(self) -> InsightStats:
        row = self._conn.execute(
            "SELECT COUNT(*), COALESCE(SUM(LENGTH(data)), 0) FROM insights"
        ).fetchone()
        return InsightStats(count=row[0], total_size=row[1])

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    @staticmethod
    def _decode(file_path: str, data: str) -> InsightRecord | None:
        try:
            return InsightRecord.model_validate_json(data)
        except ValidationError as e:
            logger.warning("Failed to deserialize insight for %s: %s", file_path, e)
            return None
