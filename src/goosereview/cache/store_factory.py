# src/goosereview/cache/store_factory.py — v1
"""Factory for insight store instantiation."""

from __future__ import annotations

from pathlib import Path

from goosereview.cache.base_insight_store import BaseInsightStore
from goosereview.config.settings import Settings


def create_insight_store(
    project_root: Path, settings: Settings | None = None,
) -> BaseInsightStore:
    """Instantiate the configured insight backend for a project.

    Args:
        project_root: Project whose state directory holds the store.
        settings: Application settings. Defaults to the JSON backend.

    Returns:
        Configured BaseInsightStore implementation.
    """
    settings = settings or Settings(_env_file=None)  # type: ignore[call-arg]
    state_dir = settings.state_path(project_root)
    backend = settings.insight_backend

    if backend == "json":
        from goosereview.cache.json_store import JsonInsightStore
        return JsonInsightStore(insights_dir=state_dir / "insights")

    if backend == "sqlite":
        from goosereview.cache.sqlite_store import SqliteInsightStore
        return SqliteInsightStore(db_path=state_dir / "insights.db")

    raise ValueError(f"Unsupported insight backend: {backend!r}")
