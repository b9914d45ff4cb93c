# src/goosereview/cache/models.py — v1
"""Insight store models: InsightRecord, InsightCheckResult, InsightStats."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from goosereview.providers.models import AnalysisResult


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InsightRecord(_CamelModel):
    """Durable cache entry keyed by relative file path."""

    file_path: str
    code_hash: str
    analysis: AnalysisResult | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class InsightCheckResult(_CamelModel):
    """Outcome of comparing a stored record against a current fingerprint."""

    has_record: bool = False
    fingerprint_matches: bool = False
    record: InsightRecord | None = None


class InsightStats(_CamelModel):
    count: int = 0
    total_size: int = 0


def needs_analysis(check: InsightCheckResult, force: bool = False) -> bool:
    """Cache policy: analyze iff forced, unrecorded, or fingerprint changed.

    Keyed by path only: a file moved without modification has no record at
    its new path and is analyzed again.
    """
    if force:
        return True
    if not check.has_record or check.record is None:
        return True
    if check.record.analysis is None:
        return True
    return not check.fingerprint_matches
