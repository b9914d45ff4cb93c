# tests/conftest.py — v1
"""Shared test fixtures for all unit and integration tests.

Provides a scripted analysis provider, a small sample project on disk,
project config and settings. No network access — every provider call is
served by FakeProvider.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from goosereview.cache.json_store import JsonInsightStore
from goosereview.config.project import ProjectConfig, ProviderConfig
from goosereview.config.settings import Settings
from goosereview.providers.base_provider import BaseAnalysisProvider
from goosereview.providers.models import AnalysisOptions, AnalysisResult, Issue


# === Scripted provider ===


class FakeProvider(BaseAnalysisProvider):
    """In-memory provider recording calls and peak concurrency.

    Args:
        delays: Per-path sleep before answering (default_delay otherwise).
        errors: Per-path exception raised instead of answering.
        fail_times: Per-path number of leading calls that raise errors[path].
        hang_on: Paths whose call never completes on its own.
    """

    def __init__(
        self,
        delays: dict[str, float] | None = None,
        errors: dict[str, BaseException] | None = None,
        fail_times: dict[str, int] | None = None,
        hang_on: set[str] | None = None,
        default_delay: float = 0.0,
        severity: str = "high",
        timeout_s: float = 5.0,
    ) -> None:
        self.delays = delays or {}
        self.errors = errors or {}
        self.fail_times = fail_times or {}
        self.hang_on = hang_on or set()
        self.default_delay = default_delay
        self.severity = severity
        self._timeout_s = timeout_s
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def analyze(self, code: str, options: AnalysisOptions) -> AnalysisResult:
        path = options.file_path or ""
        self.calls.append(path)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if path in self.hang_on:
                await asyncio.sleep(3600)
            await asyncio.sleep(self.delays.get(path, self.default_delay))
            if path in self.errors:
                remaining = self.fail_times.get(path)
                if remaining is None:
                    raise self.errors[path]
                if remaining > 0:
                    self.fail_times[path] = remaining - 1
                    raise self.errors[path]
            return AnalysisResult(
                issues=[Issue(severity=self.severity, message=f"finding in {path}")],
                summary=f"Reviewed {path}",
            )
        finally:
            self.in_flight -= 1

    @property
    def provider_name(self) -> str:
        return "fake"

    @property
    def model(self) -> str:
        return "fake-model"

    @property
    def timeout_s(self) -> float:
        return self._timeout_s


# === FIXTURES: Sample project ===


SAMPLE_FILES: dict[str, str] = {
    "src/app.py": "def main():\n    return 1\n",
    "src/util.js": "export const add = (a, b) => a + b;\n",
    "lib/server.go": "package main\n\nfunc main() {}\n",
    "README.md": "# sample\n",
    "node_modules/dep/index.js": "module.exports = {};\n",
}

# Discovery order: directories and files sorted by name at every level
ANALYZABLE_ORDER = ["lib/server.go", "src/app.py", "src/util.js"]


def write_files(root: Path, files: dict[str, str]) -> None:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


@pytest.fixture
def sample_project(tmp_path: Path) -> Path:
    """Project with 3 analyzable files, 1 non-analyzable and 1 ignored."""
    root = tmp_path / "project"
    root.mkdir()
    write_files(root, SAMPLE_FILES)
    return root


@pytest.fixture
def project_config() -> ProjectConfig:
    return ProjectConfig(
        ai_provider="openai",
        openai=ProviderConfig(api_key="sk-test", model="gpt-4o"),
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, load_gitignore=True, retry_max_attempts=0)  # type: ignore[call-arg]


@pytest.fixture
def json_store(sample_project: Path) -> JsonInsightStore:
    return JsonInsightStore(insights_dir=sample_project / ".code-review" / "insights")


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def make_provider() -> type[FakeProvider]:
    """FakeProvider class, for tests that script failures or delays."""
    return FakeProvider


@pytest.fixture
def analyzable_order() -> list[str]:
    return list(ANALYZABLE_ORDER)
