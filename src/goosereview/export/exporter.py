# src/goosereview/export/exporter.py — v1
"""Batch result export to JSON, CSV, plain text and markdown."""

from __future__ import annotations

import csv
import logging
from datetime import datetime, timezone
from pathlib import Path

from goosereview.batch.models import BatchAnalysisResult, FileOutcome

logger = logging.getLogger(__name__)

CSV_FIELDNAMES = [
    "file_path", "status", "severity", "category", "line", "column",
    "message", "suggestion", "error_kind", "error",
]


def export_result_json(result: BatchAnalysisResult, path: Path) -> None:
    """Export the full batch result as camelCase JSON.

    Args:
        result: Batch result to export.
        path: Output file path.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(result.model_dump_json(by_alias=True, indent=2), encoding="utf-8")


def export_result_csv(result: BatchAnalysisResult, path: Path) -> int:
    """Export one row per finding plus one row per failed file.

    Args:
        result: Batch result to export.
        path: Output file path.

    Returns:
        Number of data rows written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    rows = 0

    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDNAMES)
        writer.writeheader()
        for outcome in result.results:
            if outcome.status == "failed":
                writer.writerow({
                    "file_path": outcome.file_path,
                    "status": outcome.status,
                    "error_kind": outcome.error_kind or "",
                    "error": outcome.error or "",
                })
                rows += 1
                continue
            if outcome.analysis is None:
                continue
            for issue in outcome.analysis.issues:
                writer.writerow({
                    "file_path": outcome.file_path,
                    "status": outcome.status,
                    "severity": issue.severity,
                    "category": issue.category,
                    "line": issue.line,
                    "column": "" if issue.column is None else issue.column,
                    "message": issue.message,
                    "suggestion": issue.suggestion,
                })
                rows += 1

    logger.debug("Wrote %d CSV rows to %s", rows, path)
    return rows


def render_text_summary(result: BatchAnalysisResult) -> str:
    """Generate a human-readable summary of a batch run."""
    summary = result.summary
    lines: list[str] = [
        "=== Batch Analysis Summary ===",
        f"Total files in project : {result.total_files}",
        f"Analyzable files       : {result.analyzable_files}",
        f"Files analyzed         : {result.analyzed_count}",
        f"Files skipped          : {result.skipped_count}",
        f"Files with errors      : {result.error_count}",
        f"Duration               : {result.total_duration_ms / 1000:.1f}s",
        "",
        "--- Issues Found ---",
        f"  Total    : {summary.total_issues}",
    ]
    for label, count in _severity_rows(result):
        if count:
            lines.append(f"  {label:8s} : {count}")

    if result.too_large_count:
        lines.append(f"\nSkipped as too large: {result.too_large_count}")

    failed = result.failed
    if failed:
        lines.append("\nFiles with errors:")
        for outcome in failed:
            lines.append(f"  ✗ {outcome.file_path}: [{outcome.error_kind}] {outcome.error}")

    critical = _critical_files(result)
    if critical:
        lines.append("\nFiles with critical issues:")
        for outcome, count in critical:
            lines.append(f"  ! {outcome.file_path} ({_plural(count, 'critical issue')})")

    return "\n".join(lines)


def render_markdown_report(result: BatchAnalysisResult) -> str:
    """Render the batch result as a markdown report."""
    lines: list[str] = [
        "# Batch Analysis Report",
        "",
        f"**Generated:** {datetime.now(timezone.utc).isoformat()}",
        "",
        "## Summary",
        "",
        f"- Total files in project: {result.total_files}",
        f"- Analyzable files: {result.analyzable_files}",
        f"- Files analyzed: {result.analyzed_count}",
        f"- Files skipped: {result.skipped_count}",
        f"- Files with errors: {result.error_count}",
        "",
        "## Issues Found",
        "",
        f"- Total: {result.summary.total_issues}",
    ]
    lines.extend(f"- {label}: {count}" for label, count in _severity_rows(result))
    lines.append("")

    failed = result.failed
    if failed:
        lines.extend(["## Files with Errors", ""])
        lines.extend(f"- `{o.file_path}`: {o.error}" for o in failed)
        lines.append("")

    critical = _critical_files(result)
    if critical:
        lines.extend(["## Files with Critical Issues", ""])
        lines.extend(
            f"- `{o.file_path}` ({_plural(count, 'critical issue')})" for o, count in critical
        )
        lines.append("")

    return "\n".join(lines)


def _severity_rows(result: BatchAnalysisResult) -> list[tuple[str, int]]:
    s = result.summary
    return [
        ("Critical", s.critical_issues),
        ("High", s.high_issues),
        ("Medium", s.medium_issues),
        ("Low", s.low_issues),
        ("Info", s.info_issues),
    ]


def _critical_files(result: BatchAnalysisResult) -> list[tuple[FileOutcome, int]]:
    found: list[tuple[FileOutcome, int]] = []
    for outcome in result.results:
        if outcome.status != "succeeded" or outcome.analysis is None:
            continue
        count = outcome.analysis.count_by_severity()["critical"]
        if count:
            found.append((outcome, count))
    return found


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'s' if count != 1 else ''}"
