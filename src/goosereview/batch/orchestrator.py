# src/goosereview/batch/orchestrator.py — v1
"""Batch orchestrator: bounded-concurrency analysis of a whole project.

One producer walks discovery and admits candidates, in discovery order,
into an asyncio.Queue whose capacity equals the worker count. A fixed pool
of `concurrency` workers drains it, so at most `concurrency` provider calls
are ever in flight. Each outcome is stored under its admission index and
the final list is rebuilt in that order once every worker has exited.

Per file: read → fingerprint → cache check → skip, or analyze under a
deadline → persist. A failing file never aborts the batch.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import Callable
from pathlib import Path

from goosereview.batch.aggregator import aggregate
from goosereview.batch.models import (
    BatchAnalysisOptions,
    BatchAnalysisResult,
    BatchProgress,
    FileOutcome,
)
from goosereview.batch.retry import RetryPolicy, with_retry
from goosereview.cache.base_insight_store import BaseInsightStore, CacheWriteError
from goosereview.cache.fingerprint import compute_fingerprint
from goosereview.cache.models import needs_analysis
from goosereview.config.project import ProjectConfig
from goosereview.config.settings import Settings
from goosereview.discovery.models import CandidateFile
from goosereview.discovery.scanner import FileDiscovery, read_gitignore
from goosereview.logging.context import clear_context, file_context, set_run_context
from goosereview.providers.base_provider import BaseAnalysisProvider
from goosereview.providers.errors import ProviderError, ProviderErrorKind
from goosereview.providers.models import AnalysisOptions, AnalysisResult
from goosereview.providers.prompt import language_for_path

logger = logging.getLogger(__name__)

SKIP_UNCHANGED = "File not modified since last review"

_Admission = tuple[int, CandidateFile]


class BatchOrchestrator:
    """Run one provider over every analyzable file of a project."""

    def __init__(
        self,
        provider: BaseAnalysisProvider,
        store: BaseInsightStore,
        config: ProjectConfig,
        settings: Settings | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._provider = provider
        self._store = store
        self._config = config
        self._settings = settings or Settings(_env_file=None)  # type: ignore[call-arg]
        if retry_policy is None:
            retry_policy = RetryPolicy.from_settings(self._settings)
        self._retry_policy = retry_policy

    @property
    def file_timeout_s(self) -> float:
        """Deadline for one provider call; settings override the provider's own."""
        return self._settings.file_timeout_s or self._provider.timeout_s

    async def run(
        self, project_root: Path | str, options: BatchAnalysisOptions | None = None,
    ) -> BatchAnalysisResult:
        """Analyze a project and return once every admitted file is terminal.

        Raises:
            ValueError: If project_root is not a directory.
        """
        options = options or BatchAnalysisOptions()
        discovery = self.build_discovery(Path(project_root), options)

        set_run_context(uuid.uuid4().hex[:12], self._provider.provider_name)
        start = time.monotonic()
        logger.info(
            "Batch started: root=%s provider=%s model=%s concurrency=%d force=%s",
            discovery.root, self._provider.provider_name, self._provider.model,
            options.concurrency, options.force,
        )
        try:
            await self._store.load_all()
            outcomes = await self._run_pool(discovery, options)
            result = aggregate(
                outcomes,
                total_files=discovery.total_files,
                total_duration_ms=_elapsed_ms(start),
                too_large=discovery.too_large,
                discovery_errors=discovery.errors,
            )
            logger.info(
                "Batch finished: %d analyzable, %d analyzed, %d skipped, %d failed in %dms",
                result.analyzable_files, result.analyzed_count, result.skipped_count,
                result.error_count, result.total_duration_ms,
            )
            return result
        finally:
            clear_context()

    def build_discovery(self, root: Path, options: BatchAnalysisOptions) -> FileDiscovery:
        """Resolve ignore patterns and extensions for this run."""
        patterns = list(self._config.ignore_patterns)
        if self._settings.load_gitignore and root.is_dir():
            patterns.extend(read_gitignore(root))
        if options.exclude_patterns:
            patterns.extend(options.exclude_patterns)

        return FileDiscovery(
            root,
            ignore_patterns=patterns,
            extensions=options.extensions or self._config.analyzable_file_extensions,
            max_file_size=self._config.max_file_size,
            directories=options.directories,
            state_dir=self._settings.state_dir,
        )

    # --- Internal helpers ---

    async def _run_pool(
        self, discovery: FileDiscovery, options: BatchAnalysisOptions,
    ) -> list[FileOutcome]:
        concurrency = options.concurrency
        queue: asyncio.Queue[_Admission | None] = asyncio.Queue(maxsize=concurrency)
        outcomes: dict[int, FileOutcome] = {}
        progress = _ProgressTracker(options.on_progress)

        async def producer() -> None:
            try:
                for index, candidate in enumerate(discovery):
                    await queue.put((index, candidate))
                    progress.total += 1
            finally:
                for _ in range(concurrency):
                    await queue.put(None)

        async def worker() -> None:
            while True:
                item = await queue.get()
                if item is None:
                    return
                index, candidate = item
                with file_context(candidate.relative_path):
                    outcome = await self._process_safely(candidate, options.force)
                outcomes[index] = outcome
                progress.record(outcome)

        results = await asyncio.gather(
            producer(), *(worker() for _ in range(concurrency)), return_exceptions=True,
        )
        for res in results:
            if isinstance(res, BaseException):
                raise res

        return [outcomes[i] for i in sorted(outcomes)]

    async def _process_safely(self, candidate: CandidateFile, force: bool) -> FileOutcome:
        start = time.monotonic()
        try:
            return await self._process(candidate, force)
        except Exception as e:
            logger.exception("Unexpected failure on %s", candidate.relative_path)
            return FileOutcome(
                file_path=candidate.relative_path,
                status="failed",
                error=str(e) or type(e).__name__,
                error_kind=ProviderErrorKind.UNAVAILABLE.value,
                duration_ms=_elapsed_ms(start),
            )

    async def _process(self, candidate: CandidateFile, force: bool) -> FileOutcome:
        start = time.monotonic()
        path = candidate.relative_path

        try:
            raw = await asyncio.to_thread(Path(candidate.absolute_path).read_bytes)
        except OSError as e:
            logger.warning("Cannot read %s: %s", path, e)
            return FileOutcome(
                file_path=path, status="failed", error=str(e),
                error_kind="unreadable", duration_ms=_elapsed_ms(start),
            )

        fingerprint = compute_fingerprint(raw)
        check = await self._store.check(path, fingerprint)
        if not needs_analysis(check, force):
            logger.debug("Skipping %s: fingerprint unchanged", path)
            return FileOutcome(
                file_path=path, status="skipped", skip_reason=SKIP_UNCHANGED,
                fingerprint=fingerprint, duration_ms=_elapsed_ms(start),
            )

        code = raw.decode("utf-8", errors="replace")
        analysis_options = AnalysisOptions(language=language_for_path(path), file_path=path)
        try:
            analysis = await with_retry(
                lambda: self._analyze_with_deadline(code, analysis_options),
                self._retry_policy,
                label=path,
            )
        except ProviderError as e:
            logger.warning("Analysis failed for %s: %s", path, e)
            return FileOutcome(
                file_path=path, status="failed", error=e.message,
                error_kind=e.kind.value, fingerprint=fingerprint,
                duration_ms=_elapsed_ms(start),
            )

        persisted = True
        try:
            await self._store.write(path, fingerprint, analysis)
        except CacheWriteError as e:
            logger.warning("%s; it will be analyzed again next run", e)
            persisted = False

        logger.debug("Analyzed %s: %d issues", path, len(analysis.issues))
        return FileOutcome(
            file_path=path, status="succeeded", analyzed=True, analysis=analysis,
            fingerprint=fingerprint, duration_ms=_elapsed_ms(start), persisted=persisted,
        )

    async def _analyze_with_deadline(
        self, code: str, options: AnalysisOptions,
    ) -> AnalysisResult:
        timeout_s = self.file_timeout_s
        try:
            return await asyncio.wait_for(self._provider.analyze(code, options), timeout_s)
        except asyncio.TimeoutError as e:
            raise ProviderError(
                ProviderErrorKind.TIMEOUT,
                f"Analysis exceeded {timeout_s:g}s",
                provider=self._provider.provider_name,
            ) from e


class _ProgressTracker:
    """Running counters reported to the caller's progress callback."""

    def __init__(self, callback: Callable[[BatchProgress], None] | None) -> None:
        self._callback = callback
        self.analyzed = 0
        self.skipped = 0
        self.errors = 0
        self.total = 0

    def record(self, outcome: FileOutcome) -> None:
        if outcome.status == "succeeded":
            self.analyzed += 1
        elif outcome.status == "skipped":
            self.skipped += 1
        else:
            self.errors += 1

        if self._callback is None:
            return
        snapshot = BatchProgress(
            current_file=outcome.file_path,
            analyzed=self.analyzed,
            skipped=self.skipped,
            errors=self.errors,
            total=self.total,
            status=outcome.status,
        )
        try:
            self._callback(snapshot)
        except Exception:
            logger.warning("Progress callback failed", exc_info=True)


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)
