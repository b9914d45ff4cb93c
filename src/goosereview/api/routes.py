# src/goosereview/api/routes.py — v1
"""
HTTP trigger for batch review and insight lookup.

Every response uses the envelope {success, data} or {success: false, error}.
A batch that cannot start (no provider configured) answers 500; a batch
that starts always answers 200, with failed files counted in errorCount.
"""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, FastAPI, Query, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from goosereview.api import facade
from goosereview.batch.models import BatchAnalysisOptions
from goosereview.cache.base_insight_store import BaseInsightStore
from goosereview.config.settings import ConfigurationError, Settings
from goosereview.providers.base_provider import BaseAnalysisProvider
from goosereview.version import __version__

logger = logging.getLogger(__name__)

batch_router = APIRouter(prefix="/api/batch", tags=["batch"])
insights_router = APIRouter(prefix="/api/insights", tags=["insights"])


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BatchAnalyzeRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    force: bool = False
    concurrency: int | None = None
    extensions: list[str] | None = None
    directories: list[str] | None = None
    exclude_patterns: list[str] | None = None


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------


def _ok(data: object) -> JSONResponse:
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json", by_alias=True)
    return JSONResponse({"success": True, "data": data})


def _fail(status_code: int, error: str) -> JSONResponse:
    return JSONResponse({"success": False, "error": error}, status_code=status_code)


def _deps(request: Request) -> tuple[Path, Settings, BaseInsightStore | None]:
    state = request.app.state
    return state.project_root, state.settings, state.store


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@batch_router.post("/analyze")
async def analyze_project(body: BatchAnalyzeRequest, request: Request) -> JSONResponse:
    """Run a batch over the served project."""
    root, settings, store = _deps(request)
    options = BatchAnalysisOptions(
        force=body.force,
        concurrency=body.concurrency or settings.default_concurrency,
        extensions=body.extensions,
        directories=body.directories,
        exclude_patterns=body.exclude_patterns,
    )
    provider: BaseAnalysisProvider | None = request.app.state.provider

    try:
        result = await facade.run_batch_analysis(
            root, options, settings=settings, store=store, provider=provider,
        )
    except ConfigurationError as exc:
        logger.error("Batch analysis cannot start: %s", exc)
        return _fail(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))
    except ValueError as exc:
        return _fail(status.HTTP_400_BAD_REQUEST, str(exc))

    return _ok(result)


@insights_router.get("")
async def get_insight(
    request: Request, file_path: str = Query(..., alias="filePath"),
) -> JSONResponse:
    root, settings, store = _deps(request)
    record = await facade.get_insight(root, file_path, settings=settings, store=store)
    if record is None:
        return _fail(status.HTTP_404_NOT_FOUND, f"No insight for {file_path}")
    return _ok(record)


@insights_router.get("/check")
async def check_insight(
    request: Request,
    file_path: str = Query(..., alias="filePath"),
    code_hash: str = Query(..., alias="hash"),
) -> JSONResponse:
    root, settings, store = _deps(request)
    result = await facade.check_insight(
        root, file_path, code_hash, settings=settings, store=store,
    )
    return _ok(result)


@insights_router.delete("")
async def delete_insight(
    request: Request, file_path: str = Query(..., alias="filePath"),
) -> JSONResponse:
    root, settings, store = _deps(request)
    deleted = await facade.delete_insight(root, file_path, settings=settings, store=store)
    if not deleted:
        return _fail(status.HTTP_404_NOT_FOUND, f"No insight for {file_path}")
    return _ok({"deleted": True})


@insights_router.get("/stats")
async def get_stats(request: Request) -> JSONResponse:
    root, settings, store = _deps(request)
    return _ok(await facade.insight_stats(root, settings=settings, store=store))


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------


def create_app(
    project_root: Path | str,
    *,
    settings: Settings | None = None,
    store: BaseInsightStore | None = None,
    provider: BaseAnalysisProvider | None = None,
) -> FastAPI:
    """
    Create the FastAPI application serving one project.

    store and provider are normally left unset: each request then opens
    the configured insight backend and builds the provider from the
    project's current config.json, so configuration edits apply to the
    next batch without a restart.
    """
    application = FastAPI(title="goose-review", version=__version__)
    application.state.project_root = Path(project_root).expanduser()
    application.state.settings = settings or Settings()
    application.state.store = store
    application.state.provider = provider

    application.include_router(batch_router)
    application.include_router(insights_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    return application
