# tests/integration/logging/test_int_logging_batch.py — v1
"""Integration tests for logging during a batch run.

Covers: logging/logger.py, logging/handlers.py, logging/context.py as
driven by batch/orchestrator.py. No network required.
"""

from __future__ import annotations

import json
import logging

import pytest

from goosereview.api.facade import run_batch_analysis
from goosereview.batch.models import BatchAnalysisOptions
from goosereview.logging.context import get_context
from goosereview.logging.logger import ROOT_LOGGER, setup_logging
from goosereview.providers.errors import ProviderError, ProviderErrorKind

pytestmark = pytest.mark.integration


@pytest.fixture
def json_log_file(tmp_path):
    logger = logging.getLogger(ROOT_LOGGER)
    handlers, level = list(logger.handlers), logger.level
    log_file = tmp_path / "logs" / "review.jsonl"
    setup_logging(level="DEBUG", log_format="json", log_file=log_file)
    yield log_file
    for handler in logger.handlers:
        handler.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)


def _entries(log_file) -> list[dict]:
    for handler in logging.getLogger(ROOT_LOGGER).handlers:
        handler.flush()
    return [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]


class TestBatchLogging:

    @pytest.mark.asyncio
    async def test_entries_carry_run_and_file_context(
        self, sample_project, project_config, settings, make_provider, json_log_file,
    ):
        provider = make_provider(errors={
            "src/util.js": ProviderError(ProviderErrorKind.RATE_LIMITED, "429", provider="fake"),
        })
        await run_batch_analysis(
            sample_project, BatchAnalysisOptions(concurrency=3),
            config=project_config, settings=settings, provider=provider,
        )

        entries = _entries(json_log_file)
        started = next(e for e in entries if e["message"].startswith("Batch started"))
        run_id = started["context"]["run_id"]
        assert started["context"]["provider"] == "fake"
        assert "file_path" not in started["context"]

        failure = next(e for e in entries if e["message"].startswith("Analysis failed"))
        assert failure["level"] == "WARNING"
        assert failure["context"] == {"run_id": run_id, "file_path": "src/util.js", "provider": "fake"}

        analyzed = {
            e["context"]["file_path"] for e in entries if e["message"].startswith("Analyzed ")
        }
        assert analyzed == {"lib/server.go", "src/app.py"}

    @pytest.mark.asyncio
    async def test_context_cleared_after_run(
        self, sample_project, project_config, settings, fake_provider, json_log_file,
    ):
        await run_batch_analysis(
            sample_project, config=project_config, settings=settings, provider=fake_provider,
        )
        assert get_context().as_dict() == {}
