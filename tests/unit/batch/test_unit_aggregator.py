# tests/unit/batch/test_unit_aggregator.py — v1
"""Tests for batch/aggregator.py — counts and severity folding."""

from __future__ import annotations

from goosereview.batch.aggregator import aggregate, summarize_severities
from goosereview.batch.models import FileOutcome
from goosereview.discovery.models import DiscoveryError
from goosereview.providers.models import AnalysisResult, Issue


def _analysis(*severities: str) -> AnalysisResult:
    return AnalysisResult(issues=[Issue(severity=s, message=s) for s in severities])


def _outcomes() -> list[FileOutcome]:
    return [
        FileOutcome(file_path="a.py", status="succeeded", analyzed=True,
                    analysis=_analysis("critical", "high", "info")),
        FileOutcome(file_path="b.py", status="skipped", skip_reason="unchanged",
                    analysis=_analysis("critical")),
        FileOutcome(file_path="c.py", status="failed", error="down", error_kind="unavailable"),
        FileOutcome(file_path="d.py", status="succeeded", analyzed=True,
                    analysis=_analysis("medium", "low")),
    ]


class TestSummarizeSeverities:
    def test_only_succeeded_outcomes_count(self):
        summary = summarize_severities(_outcomes())
        assert summary.total_issues == 5
        assert summary.critical_issues == 1
        assert summary.high_issues == 1
        assert summary.medium_issues == 1
        assert summary.low_issues == 1
        assert summary.info_issues == 1

    def test_empty(self):
        assert summarize_severities([]).total_issues == 0


class TestAggregate:
    def test_counts(self):
        result = aggregate(_outcomes(), total_files=10, total_duration_ms=42)
        assert result.analyzable_files == 4
        assert result.analyzed_count == 2
        assert result.skipped_count == 1
        assert result.error_count == 1
        assert result.total_files == 10
        assert result.total_duration_ms == 42
        assert (
            result.analyzed_count + result.skipped_count + result.error_count
            == result.analyzable_files
        )

    def test_preserves_order(self):
        result = aggregate(_outcomes(), total_files=4, total_duration_ms=0)
        assert [r.file_path for r in result.results] == ["a.py", "b.py", "c.py", "d.py"]

    def test_extras(self):
        result = aggregate(
            [], total_files=2, total_duration_ms=0,
            too_large=["big.js"],
            discovery_errors=[DiscoveryError(path="secret", message="Permission denied")],
        )
        assert result.too_large_count == 1
        assert result.too_large_files == ["big.js"]
        assert result.discovery_errors[0].path == "secret"

    def test_failed_property(self):
        result = aggregate(_outcomes(), total_files=4, total_duration_ms=0)
        assert [o.file_path for o in result.failed] == ["c.py"]
