# src/goosereview/providers/models.py — v1
"""Provider-facing types: AnalysisOptions, Issue, AnalysisResult."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Severity = Literal["critical", "high", "medium", "low", "info"]
Category = Literal["quality", "security", "performance", "best-practice", "bug"]

SEVERITIES: tuple[str, ...] = ("critical", "high", "medium", "low", "info")
CATEGORIES: tuple[str, ...] = ("quality", "security", "performance", "best-practice", "bug")


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnalysisOptions(_CamelModel):
    """Per-call options passed to a provider."""

    language: str | None = None
    file_path: str | None = None
    check_quality: bool = True
    check_security: bool = True
    check_performance: bool = True
    check_best_practices: bool = True
    check_bugs: bool = True


class CodeExample(_CamelModel):
    before: str
    after: str


class Issue(_CamelModel):
    """Single severity-tagged finding."""

    severity: Severity = "info"
    category: Category = "quality"
    line: int = 1
    column: int | None = None
    message: str = ""
    suggestion: str = ""
    code_example: CodeExample | None = None


class AnalysisResult(_CamelModel):
    """Normalized review returned by any provider."""

    issues: list[Issue] = Field(default_factory=list)
    summary: str = "Analysis completed."
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def count_by_severity(self) -> dict[str, int]:
        counts = dict.fromkeys(SEVERITIES, 0)
        for issue in self.issues:
            counts[issue.severity] += 1
        return counts
