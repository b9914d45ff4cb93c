# src/goosereview/api/facade.py — v1
"""Public API facade — single entry point for batch review and insight lookup.

Usage:
    from goosereview.api.facade import run_batch_analysis
    result = await run_batch_analysis("path/to/project", BatchAnalysisOptions(concurrency=4))
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from goosereview.batch.models import BatchAnalysisOptions, BatchAnalysisResult
from goosereview.batch.orchestrator import BatchOrchestrator
from goosereview.cache.base_insight_store import BaseInsightStore
from goosereview.cache.models import InsightCheckResult, InsightRecord, InsightStats
from goosereview.cache.store_factory import create_insight_store
from goosereview.config.project import ProjectConfig, load_project_config
from goosereview.config.settings import Settings
from goosereview.providers.base_provider import BaseAnalysisProvider
from goosereview.providers.factory import create_provider

logger = logging.getLogger(__name__)


async def run_batch_analysis(
    project_root: Path | str,
    options: BatchAnalysisOptions | None = None,
    *,
    config: ProjectConfig | None = None,
    settings: Settings | None = None,
    store: BaseInsightStore | None = None,
    provider: BaseAnalysisProvider | None = None,
) -> BatchAnalysisResult:
    """Review every analyzable file of a project.

    Configuration is resolved and the provider built before anything is
    scheduled or any store is opened:
      1. Validate the project root
      2. Load the project config (unless given)
      3. Build the active provider (unless given)
      4. Open the insight store and run the orchestrator

    Args:
        project_root: Project directory to review.
        options: Batch options. Defaults use settings.default_concurrency.
        config: Project configuration. Loaded from .code-review/config.json if None.
        settings: Process settings. Loaded from environment if None.
        store: Insight store. The configured backend is opened (and closed) if None.
        provider: Analysis provider. Built from config if None.

    Returns:
        BatchAnalysisResult with per-file outcomes in discovery order.

    Raises:
        ValueError: If project_root is not a directory.
        ConfigurationError: If the provider is unknown or not fully configured.
    """
    root = _resolve_root(project_root)
    settings = settings or Settings()
    config = config or load_project_config(root)
    provider = provider or create_provider(config)
    options = options or BatchAnalysisOptions(concurrency=settings.default_concurrency)

    async with _open_store(root, settings, store) as insight_store:
        orchestrator = BatchOrchestrator(provider, insight_store, config, settings)
        return await orchestrator.run(root, options)


async def get_insight(
    project_root: Path | str,
    file_path: str,
    *,
    settings: Settings | None = None,
    store: BaseInsightStore | None = None,
) -> InsightRecord | None:
    """Return the stored record for a project-relative path."""
    root = _resolve_root(project_root)
    async with _open_store(root, settings or Settings(), store) as insight_store:
        return await insight_store.get(file_path)


async def check_insight(
    project_root: Path | str,
    file_path: str,
    fingerprint: str,
    *,
    settings: Settings | None = None,
    store: BaseInsightStore | None = None,
) -> InsightCheckResult:
    """Compare the stored record for a path with a content fingerprint."""
    root = _resolve_root(project_root)
    async with _open_store(root, settings or Settings(), store) as insight_store:
        return await insight_store.check(file_path, fingerprint)


async def delete_insight(
    project_root: Path | str,
    file_path: str,
    *,
    settings: Settings | None = None,
    store: BaseInsightStore | None = None,
) -> bool:
    root = _resolve_root(project_root)
    async with _open_store(root, settings or Settings(), store) as insight_store:
        return await insight_store.delete(file_path)


async def clear_insights(
    project_root: Path | str,
    *,
    settings: Settings | None = None,
    store: BaseInsightStore | None = None,
) -> None:
    root = _resolve_root(project_root)
    async with _open_store(root, settings or Settings(), store) as insight_store:
        await insight_store.clear()
    logger.info("Cleared insights for %s", root)


async def insight_stats(
    project_root: Path | str,
    *,
    settings: Settings | None = None,
    store: BaseInsightStore | None = None,
) -> InsightStats:
    root = _resolve_root(project_root)
    async with _open_store(root, settings or Settings(), store) as insight_store:
        return await insight_store.stats()


# --- Internal helpers ---


def _resolve_root(project_root: Path | str) -> Path:
    root = Path(project_root).expanduser()
    if not root.is_dir():
        raise ValueError(f"Project root is not a directory: {root}")
    return root


@asynccontextmanager
async def _open_store(
    root: Path, settings: Settings, store: BaseInsightStore | None,
) -> AsyncIterator[BaseInsightStore]:
    """Yield the caller's store, or open the configured one and close it after."""
    if store is not None:
        yield store
        return
    owned = create_insight_store(root, settings)
    try:
        yield owned
    finally:
        owned.close()
