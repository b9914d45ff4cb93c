# tests/unit/api/test_unit_routes.py — v1
"""Tests for api.routes — HTTP envelopes and status codes."""

from __future__ import annotations

import asyncio

import pytest
from fastapi.testclient import TestClient

from goosereview.api.routes import create_app
from goosereview.cache.fingerprint import compute_text_fingerprint
from goosereview.providers.models import AnalysisResult


@pytest.fixture
def client(sample_project, settings, json_store, fake_provider):
    app = create_app(sample_project, settings=settings, store=json_store, provider=fake_provider)
    with TestClient(app) as test_client:
        yield test_client


class TestHealth:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"


class TestBatchAnalyze:
    def test_analyze(self, client, analyzable_order):
        resp = client.post("/api/batch/analyze", json={"concurrency": 2})
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        data = body["data"]
        assert data["analyzedCount"] == 3
        assert data["errorCount"] == 0
        assert [r["filePath"] for r in data["results"]] == analyzable_order
        assert data["summary"]["highIssues"] == 3

    def test_second_run_skips(self, client):
        client.post("/api/batch/analyze", json={})
        data = client.post("/api/batch/analyze", json={}).json()["data"]
        assert data["skippedCount"] == 3
        assert data["analyzedCount"] == 0

    def test_force_and_extensions(self, client):
        client.post("/api/batch/analyze", json={})
        data = client.post(
            "/api/batch/analyze", json={"force": True, "extensions": [".py"]},
        ).json()["data"]
        assert [r["filePath"] for r in data["results"]] == ["src/app.py"]
        assert data["analyzedCount"] == 1

    def test_failures_still_200(self, sample_project, settings, json_store, make_provider):
        from goosereview.providers.errors import ProviderError, ProviderErrorKind

        provider = make_provider(errors={
            "src/app.py": ProviderError(ProviderErrorKind.AUTH, "bad key", provider="fake"),
        })
        app = create_app(sample_project, settings=settings, store=json_store, provider=provider)
        with TestClient(app) as client:
            resp = client.post("/api/batch/analyze", json={})
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["errorCount"] == 1
        assert data["results"][1]["errorKind"] == "auth"

    def test_unconfigured_provider_is_500(self, sample_project, settings, json_store):
        app = create_app(sample_project, settings=settings, store=json_store)
        with TestClient(app) as client:
            resp = client.post("/api/batch/analyze", json={})
        assert resp.status_code == 500
        body = resp.json()
        assert body["success"] is False
        assert "API key" in body["error"]

    def test_missing_root_is_400(self, tmp_path, settings, fake_provider):
        app = create_app(tmp_path / "gone", settings=settings, provider=fake_provider)
        with TestClient(app) as client:
            resp = client.post("/api/batch/analyze", json={})
        assert resp.status_code == 400
        assert resp.json()["success"] is False


class TestInsights:
    def _seed(self, client, json_store):
        fingerprint = compute_text_fingerprint("print(1)\n")
        asyncio.run(json_store.write("src/app.py", fingerprint, AnalysisResult(summary="seeded")))
        return fingerprint

    def test_get(self, client, json_store):
        self._seed(client, json_store)
        resp = client.get("/api/insights", params={"filePath": "src/app.py"})
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["filePath"] == "src/app.py"
        assert data["analysis"]["summary"] == "seeded"

    def test_get_missing_is_404(self, client):
        resp = client.get("/api/insights", params={"filePath": "nope.py"})
        assert resp.status_code == 404
        assert resp.json() == {"success": False, "error": "No insight for nope.py"}

    def test_get_requires_file_path(self, client):
        assert client.get("/api/insights").status_code == 422

    def test_check(self, client, json_store):
        fingerprint = self._seed(client, json_store)
        data = client.get(
            "/api/insights/check", params={"filePath": "src/app.py", "hash": fingerprint},
        ).json()["data"]
        assert data["hasRecord"] is True
        assert data["fingerprintMatches"] is True

        data = client.get(
            "/api/insights/check", params={"filePath": "src/app.py", "hash": "abc"},
        ).json()["data"]
        assert data["fingerprintMatches"] is False

    def test_delete(self, client, json_store):
        self._seed(client, json_store)
        resp = client.delete("/api/insights", params={"filePath": "src/app.py"})
        assert resp.json() == {"success": True, "data": {"deleted": True}}
        resp = client.delete("/api/insights", params={"filePath": "src/app.py"})
        assert resp.status_code == 404

    def test_stats(self, client, json_store):
        self._seed(client, json_store)
        data = client.get("/api/insights/stats").json()["data"]
        assert data["count"] == 1
        assert data["totalSize"] > 0
