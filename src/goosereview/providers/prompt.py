# src/goosereview/providers/prompt.py — v1
"""Review prompt construction and reply normalization shared by all providers."""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import Any

from goosereview.providers.models import (
    CATEGORIES,
    SEVERITIES,
    AnalysisOptions,
    AnalysisResult,
    CodeExample,
    Issue,
)

SYSTEM_PROMPT = (
    "You are a professional code reviewer. Analyze code and provide "
    "detailed feedback in JSON format."
)

_CHECKS: tuple[tuple[str, str], ...] = (
    ("check_quality", "Code Quality (naming, structure, readability)"),
    ("check_security", "Security Vulnerabilities (SQL injection, XSS, sensitive data exposure)"),
    ("check_performance", "Performance Issues (bottlenecks, memory leaks)"),
    ("check_best_practices", "Best Practices (framework-specific)"),
    ("check_bugs", "Potential Bugs (logic errors, edge cases)"),
)

_RESPONSE_SCHEMA = """{
  "issues": [
    {
      "severity": "critical|high|medium|low|info",
      "category": "quality|security|performance|best-practice|bug",
      "line": <line_number>,
      "column": <column_number>,
      "message": "<description_of_issue>",
      "suggestion": "<how_to_fix_it>",
      "codeExample": {
        "before": "<problematic_code>",
        "after": "<improved_code>"
      }
    }
  ],
  "summary": "<overall_summary_of_code_quality>"
}"""

LANGUAGE_BY_EXTENSION: dict[str, str] = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".py": "python",
    ".pyw": "python",
    ".java": "java",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".cxx": "cpp",
    ".hpp": "cpp",
    ".c": "c",
    ".h": "c",
    ".cs": "csharp",
    ".go": "go",
    ".rs": "rust",
    ".rb": "ruby",
    ".php": "php",
    ".swift": "swift",
    ".kt": "kotlin",
    ".kts": "kotlin",
    ".scala": "scala",
    ".m": "objectivec",
    ".sh": "bash",
    ".bash": "bash",
    ".zsh": "bash",
    ".sql": "sql",
    ".html": "html",
    ".htm": "html",
    ".css": "css",
    ".scss": "scss",
    ".vue": "vue",
    ".dart": "dart",
    ".r": "r",
    ".R": "r",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".json": "json",
}

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


def language_for_path(file_path: str) -> str:
    """Map a file path to the language name used in prompts."""
    return LANGUAGE_BY_EXTENSION.get(PurePosixPath(file_path).suffix, "unknown")


def build_review_prompt(code: str, options: AnalysisOptions) -> str:
    """Build the user prompt asking for a JSON review of one file."""
    checks = [
        f"{i}. {label}"
        for i, (flag, label) in enumerate(_CHECKS, start=1)
        if getattr(options, flag)
    ]
    language = options.language or "unknown"
    file_path = options.file_path or "unknown"

    return (
        f"Analyze the following {language} code from {file_path}.\n\n"
        f"Check for:\n{chr(10).join(checks)}\n\n"
        f"Return the results in the following JSON format:\n{_RESPONSE_SCHEMA}\n\n"
        f"Code:\n```{language}\n{code}\n```\n\n"
        "Provide specific, actionable feedback. Focus on the most important issues."
    )


def extract_json(content: str) -> str:
    """Strip a markdown fence around a JSON reply, if any."""
    match = _FENCED_BLOCK.search(content)
    if match:
        return match.group(1).strip()
    return content.strip()


def parse_review(content: str | None) -> AnalysisResult:
    """Parse and normalize a raw provider reply.

    Raises:
        ValueError: If the reply is empty or not a JSON object.
    """
    if not content or not content.strip():
        raise ValueError("Empty response from provider")
    data = json.loads(extract_json(content))
    if not isinstance(data, dict):
        raise ValueError("Provider response is not a JSON object")
    return normalize_result(data)


def normalize_result(data: dict[str, Any]) -> AnalysisResult:
    """Coerce a loosely-shaped review into an AnalysisResult."""
    raw_issues = data.get("issues") or []
    if not isinstance(raw_issues, list):
        raise ValueError("'issues' must be a list")

    issues = [_normalize_issue(raw) for raw in raw_issues if isinstance(raw, dict)]
    summary = data.get("summary")
    return AnalysisResult(
        issues=issues,
        summary=summary if isinstance(summary, str) and summary else "Analysis completed.",
        timestamp=datetime.now(timezone.utc),
    )


def _normalize_issue(raw: dict[str, Any]) -> Issue:
    severity = str(raw.get("severity") or "info").lower()
    category = str(raw.get("category") or "quality").lower()
    example = raw.get("codeExample") or raw.get("code_example")

    return Issue(
        severity=severity if severity in SEVERITIES else "info",
        category=category if category in CATEGORIES else "quality",
        line=_as_int(raw.get("line"), default=1) or 1,
        column=_as_int(raw.get("column"), default=None),
        message=str(raw.get("message") or ""),
        suggestion=str(raw.get("suggestion") or ""),
        code_example=(
            CodeExample(before=str(example.get("before", "")), after=str(example.get("after", "")))
            if isinstance(example, dict)
            else None
        ),
    )


def _as_int(value: Any, default: int | None) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default
