# tests/unit/batch/test_unit_retry.py — v1
"""Tests for batch/retry.py — retry policy and backoff."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from goosereview.batch.retry import RetryPolicy, with_retry
from goosereview.config.settings import Settings
from goosereview.providers.errors import ProviderError, ProviderErrorKind


def _error(kind: ProviderErrorKind) -> ProviderError:
    return ProviderError(kind, "nope", provider="test")


class TestRetryPolicy:
    def test_from_settings(self):
        settings = Settings(_env_file=None, retry_max_attempts=3, retry_base_delay_s=0.5)  # type: ignore[call-arg]
        policy = RetryPolicy.from_settings(settings)
        assert policy.max_retries == 3
        assert policy.base_delay_s == 0.5

    def test_should_retry_transient_only(self):
        policy = RetryPolicy(max_retries=2)
        assert policy.should_retry(_error(ProviderErrorKind.RATE_LIMITED), 1)
        assert policy.should_retry(_error(ProviderErrorKind.TIMEOUT), 1)
        assert policy.should_retry(_error(ProviderErrorKind.UNAVAILABLE), 2)
        assert not policy.should_retry(_error(ProviderErrorKind.AUTH), 1)
        assert not policy.should_retry(_error(ProviderErrorKind.MALFORMED), 1)
        assert not policy.should_retry(_error(ProviderErrorKind.TIMEOUT), 3)

    def test_exponential_delay_without_jitter(self):
        policy = RetryPolicy(base_delay_s=1.0, backoff_factor=2.0, jitter=False)
        assert policy.compute_delay(0) == 1.0
        assert policy.compute_delay(1) == 2.0
        assert policy.compute_delay(2) == 4.0

    def test_jitter_bounds(self):
        policy = RetryPolicy(base_delay_s=1.0, jitter=True)
        for _ in range(20):
            assert 0.5 <= policy.compute_delay(0) <= 1.5


class TestWithRetry:
    @pytest.mark.asyncio
    async def test_success_first_try(self):
        fn = AsyncMock(return_value="ok")
        assert await with_retry(fn, RetryPolicy(max_retries=2)) == "ok"
        assert fn.await_count == 1

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self):
        fn = AsyncMock(side_effect=[_error(ProviderErrorKind.UNAVAILABLE), "ok"])
        policy = RetryPolicy(max_retries=2, base_delay_s=0.0, jitter=False)
        assert await with_retry(fn, policy) == "ok"
        assert fn.await_count == 2

    @pytest.mark.asyncio
    async def test_exhausted_reraises_last_error(self):
        fn = AsyncMock(side_effect=_error(ProviderErrorKind.TIMEOUT))
        policy = RetryPolicy(max_retries=2, base_delay_s=0.0, jitter=False)
        with pytest.raises(ProviderError) as exc_info:
            await with_retry(fn, policy)
        assert exc_info.value.kind is ProviderErrorKind.TIMEOUT
        assert fn.await_count == 3

    @pytest.mark.asyncio
    async def test_auth_not_retried(self):
        fn = AsyncMock(side_effect=_error(ProviderErrorKind.AUTH))
        with pytest.raises(ProviderError):
            await with_retry(fn, RetryPolicy(max_retries=5, base_delay_s=0.0))
        assert fn.await_count == 1

    @pytest.mark.asyncio
    async def test_default_policy_never_retries(self):
        fn = AsyncMock(side_effect=_error(ProviderErrorKind.RATE_LIMITED))
        with pytest.raises(ProviderError):
            await with_retry(fn)
        assert fn.await_count == 1
