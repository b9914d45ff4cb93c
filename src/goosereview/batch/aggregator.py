# src/goosereview/batch/aggregator.py — v1
"""Fold per-file outcomes into a BatchAnalysisResult."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from goosereview.batch.models import BatchAnalysisResult, FileOutcome, SeveritySummary
from goosereview.discovery.models import DiscoveryError


def summarize_severities(outcomes: Iterable[FileOutcome]) -> SeveritySummary:
    """Sum issue severities over succeeded outcomes only."""
    counts = {"critical": 0, "high": 0, "medium": 0, "low": 0, "info": 0}
    for outcome in outcomes:
        if outcome.status != "succeeded" or outcome.analysis is None:
            continue
        for severity, n in outcome.analysis.count_by_severity().items():
            counts[severity] += n

    return SeveritySummary(
        total_issues=sum(counts.values()),
        critical_issues=counts["critical"],
        high_issues=counts["high"],
        medium_issues=counts["medium"],
        low_issues=counts["low"],
        info_issues=counts["info"],
    )


def aggregate(
    outcomes: Sequence[FileOutcome],
    *,
    total_files: int,
    total_duration_ms: int,
    too_large: Sequence[str] = (),
    discovery_errors: Sequence[DiscoveryError] = (),
) -> BatchAnalysisResult:
    """Build the batch result. outcomes must already be in discovery order."""
    analyzed = sum(1 for o in outcomes if o.status == "succeeded")
    skipped = sum(1 for o in outcomes if o.status == "skipped")
    errors = sum(1 for o in outcomes if o.status == "failed")

    return BatchAnalysisResult(
        total_files=total_files,
        analyzable_files=len(outcomes),
        analyzed_count=analyzed,
        skipped_count=skipped,
        error_count=errors,
        results=list(outcomes),
        total_duration_ms=total_duration_ms,
        summary=summarize_severities(outcomes),
        too_large_count=len(too_large),
        too_large_files=list(too_large),
        discovery_errors=list(discovery_errors),
    )
