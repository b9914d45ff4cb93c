# src/goosereview/batch/models.py — v1
"""Batch models: options, per-file outcomes and the aggregated result."""

from __future__ import annotations

from collections.abc import Callable
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from goosereview.discovery.models import DiscoveryError
from goosereview.providers.models import AnalysisResult

OutcomeStatus = Literal["skipped", "succeeded", "failed"]
ErrorKind = Literal["timeout", "auth", "rate_limited", "malformed", "unavailable", "unreadable"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BatchProgress(_CamelModel):
    """Snapshot passed to the progress callback after each terminal outcome."""

    current_file: str
    analyzed: int = 0
    skipped: int = 0
    errors: int = 0
    total: int = 0
    status: OutcomeStatus


class BatchAnalysisOptions(_CamelModel):
    """Caller-supplied knobs for one batch run.

    concurrency is normalized rather than validated: anything below 1
    becomes 1.
    """

    force: bool = False
    concurrency: int = 1
    extensions: list[str] | None = None
    directories: list[str] | None = None
    exclude_patterns: list[str] | None = None
    on_progress: Callable[[BatchProgress], None] | None = Field(default=None, exclude=True)

    @field_validator("concurrency", mode="before")
    @classmethod
    def _clamp_concurrency(cls, value: object) -> int:
        if value is None:
            return 1
        return max(1, int(value))  # type: ignore[arg-type]


class FileOutcome(_CamelModel):
    """Terminal state of one admitted file."""

    file_path: str
    status: OutcomeStatus
    analyzed: bool = False
    analysis: AnalysisResult | None = None
    error: str | None = None
    error_kind: ErrorKind | None = None
    skip_reason: str | None = None
    duration_ms: int = 0
    fingerprint: str | None = None
    persisted: bool = False


class SeveritySummary(_CamelModel):
    total_issues: int = 0
    critical_issues: int = 0
    high_issues: int = 0
    medium_issues: int = 0
    low_issues: int = 0
    info_issues: int = 0


class BatchAnalysisResult(_CamelModel):
    """Aggregate of one batch run; results are in discovery order."""

    total_files: int = 0
    analyzable_files: int = 0
    analyzed_count: int = 0
    skipped_count: int = 0
    error_count: int = 0
    results: list[FileOutcome] = Field(default_factory=list)
    total_duration_ms: int = 0
    summary: SeveritySummary = Field(default_factory=SeveritySummary)
    too_large_count: int = 0
    too_large_files: list[str] = Field(default_factory=list)
    discovery_errors: list[DiscoveryError] = Field(default_factory=list)

    @property
    def failed(self) -> list[FileOutcome]:
        return [r for r in self.results if r.status == "failed"]
