# tests/unit/cache/test_unit_store_factory.py — v1
"""Tests for cache/store_factory.py — backend selection."""

from __future__ import annotations

import pytest

from goosereview.cache.json_store import JsonInsightStore
from goosereview.cache.sqlite_store import SqliteInsightStore
from goosereview.cache.store_factory import create_insight_store
from goosereview.config.settings import Settings


class TestCreateInsightStore:
    def test_default_json(self, tmp_path):
        store = create_insight_store(tmp_path)
        assert isinstance(store, JsonInsightStore)
        assert store.root == tmp_path / ".code-review" / "insights"

    def test_sqlite(self, tmp_path):
        settings = Settings(_env_file=None, insight_backend="sqlite")  # type: ignore[call-arg]
        store = create_insight_store(tmp_path, settings)
        try:
            assert isinstance(store, SqliteInsightStore)
            assert (tmp_path / ".code-review" / "insights.db").exists()
        finally:
            store.close()

    def test_custom_state_dir(self, tmp_path):
        settings = Settings(_env_file=None, state_dir=".state")  # type: ignore[call-arg]
        store = create_insight_store(tmp_path, settings)
        assert store.root == tmp_path / ".state" / "insights"

    def test_unknown_backend(self, tmp_path):
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        object.__setattr__(settings, "insight_backend", "redis")
        with pytest.raises(ValueError, match="Unsupported insight backend"):
            create_insight_store(tmp_path, settings)
