# tests/unit/cache/test_unit_insight_models.py — v1
"""Tests for cache/models.py — record shape and the cache policy."""

from __future__ import annotations

from goosereview.cache.models import InsightCheckResult, InsightRecord, needs_analysis
from goosereview.providers.models import AnalysisResult


def _check(has_record: bool, matches: bool, analysis: bool = True) -> InsightCheckResult:
    record = None
    if has_record:
        record = InsightRecord(
            file_path="a.py", code_hash="h",
            analysis=AnalysisResult() if analysis else None,
        )
    return InsightCheckResult(has_record=has_record, fingerprint_matches=matches, record=record)


class TestNeedsAnalysis:
    def test_no_record(self):
        assert needs_analysis(_check(False, False)) is True

    def test_matching_record_skipped(self):
        assert needs_analysis(_check(True, True)) is False

    def test_changed_fingerprint(self):
        assert needs_analysis(_check(True, False)) is True

    def test_force_always_analyzes(self):
        assert needs_analysis(_check(True, True), force=True) is True

    def test_record_without_analysis(self):
        assert needs_analysis(_check(True, True, analysis=False)) is True


class TestInsightRecord:
    def test_camel_case_round_trip_keys(self):
        record = InsightRecord(file_path="src/a.py", code_hash="abc", analysis=AnalysisResult())
        data = record.model_dump(by_alias=True)
        assert data["filePath"] == "src/a.py"
        assert data["codeHash"] == "abc"

    def test_accepts_camel_case_input(self):
        record = InsightRecord.model_validate({"filePath": "a.py", "codeHash": "h"})
        assert record.file_path == "a.py"
        assert record.analysis is None
