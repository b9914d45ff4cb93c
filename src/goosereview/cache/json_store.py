# src/goosereview/cache/json_store.py — v1
"""JSON file-based insight store (default GOOSE_INSIGHT_BACKEND=json).

One JSON document per file path under <project>/.code-review/insights/.
Writes land in a temp file in the same directory and are moved into place
with os.replace, so readers never observe a partial record and a crash
loses at most the record being written.
"""

from __future__ import annotations

import asyncio
import base64
import logging
import os
import shutil
import tempfile
from pathlib import Path

from pydantic import ValidationError

from goosereview.cache.base_insight_store import BaseInsightStore, CacheWriteError
from goosereview.cache.models import InsightRecord, InsightStats

logger = logging.getLogger(__name__)


class JsonInsightStore(BaseInsightStore):
    """File-based insight store using one JSON document per path."""

    def __init__(self, insights_dir: Path | str) -> None:
        super().__init__()
        self._root = Path(insights_dir).expanduser()
        self._index: dict[str, InsightRecord] | None = None

    @property
    def root(self) -> Path:
        return self._root

    async def get(self, file_path: str) -> InsightRecord | None:
        """Retrieve a record, from the loaded index when available."""
        if self._index is not None:
            return self._index.get(file_path)
        return self._read(self._entry_path(file_path))

    async def load_all(self) -> dict[str, InsightRecord]:
        """Read every document once and serve later lookups from memory."""
        records = await asyncio.to_thread(self._read_all)
        self._index = records
        logger.debug("Loaded %d insight records from %s", len(records), self._root)
        return dict(records)

    async def _put(self, record: InsightRecord) -> None:
        path = self._entry_path(record.file_path)
        payload = record.model_dump_json(by_alias=True, indent=2)
        try:
            await asyncio.to_thread(self._atomic_write, path, payload)
        except OSError as e:
            raise CacheWriteError(record.file_path, str(e)) from e
        if self._index is not None:
            self._index[record.file_path] = record

    async def delete(self, file_path: str) -> bool:
        """Remove the record for a path."""
        async with self.path_lock(file_path):
            path = self._entry_path(file_path)
            if self._index is not None:
                self._index.pop(file_path, None)
            if not path.exists():
                return False
            path.unlink()
            return True

    async def clear(self) -> None:
        """Remove the whole insights directory."""
        if self._root.exists():
            shutil.rmtree(self._root)
        if self._index is not None:
            self._index = {}

    async def stats(self) -> InsightStats:
        if not self._root.is_dir():
            return InsightStats()
        files = list(self._root.glob("*.json"))
        return InsightStats(
            count=len(files),
            total_size=sum(f.stat().st_size for f in files),
        )

    # --- Internal helpers ---

    def _entry_path(self, file_path: str) -> Path:
        """Return document path for a file path (url-safe base64 name)."""
        safe = base64.urlsafe_b64encode(file_path.encode("utf-8")).decode("ascii")
        return self._root / f"{safe.rstrip('=')}.json"

    def _atomic_write(self, path: Path, payload: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=".insight-", suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _read(self, path: Path) -> InsightRecord | None:
        if not path.exists():
            return None
        try:
            return InsightRecord.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.warning("Failed to read insight record %s: %s", path.name, e)
            return None

    def _read_all(self) -> dict[str, InsightRecord]:
        records: dict[str, InsightRecord] = {}
        if not self._root.is_dir():
            return records
        for path in sorted(self._root.glob("*.json")):
            record = self._read(path)
            if record is not None:
                records[record.file_path] = record
        return records
