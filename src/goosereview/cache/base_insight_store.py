# src/goosereview/cache/base_insight_store.py — v1
"""Abstract insight store interface.

Concrete backends implement the storage primitives; the public write path
is shared so that every backend serializes same-path writers under one
per-path lock while writers on different paths proceed concurrently.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from goosereview.cache.models import InsightCheckResult, InsightRecord, InsightStats
from goosereview.providers.models import AnalysisResult


class CacheWriteError(Exception):
    """Durable write of an insight record failed; the prior record is intact."""

    def __init__(self, file_path: str, reason: str) -> None:
        self.file_path = file_path
        self.reason = reason
        super().__init__(f"Failed to persist insight for {file_path!r}: {reason}")


class BaseInsightStore(ABC):
    """Unified interface for insight storage backends."""

    def __init__(self) -> None:
        self._path_locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    @asynccontextmanager
    async def path_lock(self, file_path: str) -> AsyncIterator[None]:
        """Exclusive section for one path.

        A lock lives only while some task holds or waits for it.
        """
        lock = self._path_locks.setdefault(file_path, asyncio.Lock())
        self._lock_users[file_path] = self._lock_users.get(file_path, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[file_path] -= 1
            if not self._lock_users[file_path]:
                del self._lock_users[file_path]
                del self._path_locks[file_path]

    async def check(self, file_path: str, current_fingerprint: str) -> InsightCheckResult:
        """Compare the stored record for a path with a fingerprint. Pure read."""
        record = await self.get(file_path)
        if record is None:
            return InsightCheckResult()
        return InsightCheckResult(
            has_record=True,
            fingerprint_matches=record.code_hash == current_fingerprint,
            record=record,
        )

    async def write(
        self, file_path: str, fingerprint: str, analysis: AnalysisResult,
    ) -> InsightRecord:
        """Atomically upsert the record for a path.

        Raises:
            CacheWriteError: If the backend could not persist the record.
        """
        record = InsightRecord(
            file_path=file_path,
            code_hash=fingerprint,
            analysis=analysis,
            timestamp=datetime.now(timezone.utc),
        )
        async with self.path_lock(file_path):
            await self._put(record)
        return record

    @abstractmethod
    async def get(self, file_path: str) -> InsightRecord | None:
        """Retrieve the record for a path."""

    @abstractmethod
    async def _put(self, record: InsightRecord) -> None:
        """Persist one record; raise CacheWriteError on failure."""

    @abstractmethod
    async def load_all(self) -> dict[str, InsightRecord]:
        """Load every record, keyed by path."""

    @abstractmethod
    async def delete(self, file_path: str) -> bool:
        """Remove a record. Returns True if one existed."""

    @abstractmethod
    async def clear(self) -> None:
        """Remove every record."""

    @abstractmethod
    async def stats(self) -> InsightStats:
        """Record count and storage size in bytes."""

    def close(self) -> None:
        """Release backend resources."""
