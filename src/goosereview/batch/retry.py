# src/goosereview/batch/retry.py — v1
"""Per-slot retry policy with exponential backoff.

Retries run inside the worker that owns the file, so backoff sleeps hold
the slot and the concurrency bound is never exceeded. Only transient
provider failures are retried; AUTH and MALFORMED fail immediately.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from goosereview.config.settings import Settings
from goosereview.providers.errors import ProviderError, ProviderErrorKind

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_KINDS: frozenset[ProviderErrorKind] = frozenset({
    ProviderErrorKind.RATE_LIMITED,
    ProviderErrorKind.TIMEOUT,
    ProviderErrorKind.UNAVAILABLE,
})


@dataclass(frozen=True)
class RetryPolicy:
    """Retry configuration shared by all workers of a batch."""

    max_retries: int = 0
    base_delay_s: float = 2.0
    backoff_factor: float = 2.0
    jitter: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> RetryPolicy:
        return cls(
            max_retries=settings.retry_max_attempts,
            base_delay_s=settings.retry_base_delay_s,
        )

    def should_retry(self, error: ProviderError, attempt: int) -> bool:
        """attempt is the number of calls already made (1-based)."""
        return error.kind in RETRYABLE_KINDS and attempt <= self.max_retries

    def compute_delay(self, attempt: int) -> float:
        """Delay before the retry following the given 0-based attempt."""
        delay = self.base_delay_s * (self.backoff_factor ** attempt)
        if self.jitter:
            delay *= 0.5 + random.random()  # noqa: S311
        return delay


NO_RETRY = RetryPolicy()


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    policy: RetryPolicy = NO_RETRY,
    label: str = "unknown",
) -> T:
    """Execute an async call, retrying transient ProviderErrors.

    Raises:
        ProviderError: The last error once retries are exhausted or the
            error kind is not retryable.
    """
    attempts = 0

    while True:
        try:
            return await fn()
        except ProviderError as e:
            attempts += 1
            if not policy.should_retry(e, attempts):
                raise

            delay = policy.compute_delay(attempts - 1)
            logger.warning(
                "%s: %s (attempt %d/%d), retrying in %.1fs",
                label, e.kind.value, attempts, policy.max_retries + 1, delay,
            )
            await asyncio.sleep(delay)
