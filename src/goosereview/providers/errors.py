# src/goosereview/providers/errors.py — v1
"""Uniform provider failure taxonomy.

Adapters translate every backend-specific exception into ProviderError so
the orchestrator only ever sees one exception type with a small closed set
of kinds.
"""

from __future__ import annotations

import asyncio
import json
from enum import Enum


class ProviderErrorKind(str, Enum):
    TIMEOUT = "timeout"
    AUTH = "auth"
    RATE_LIMITED = "rate_limited"
    MALFORMED = "malformed"
    UNAVAILABLE = "unavailable"


class ProviderError(Exception):
    """A provider call failed. Scoped to a single file."""

    def __init__(
        self, kind: ProviderErrorKind, message: str, provider: str = "unknown",
    ) -> None:
        self.kind = kind
        self.message = message
        self.provider = provider
        super().__init__(f"[{provider}] {kind.value}: {message}")


def classify_error(error: BaseException) -> ProviderErrorKind:
    """Classify an arbitrary backend exception.

    HTTP status codes (exposed as ``status_code`` by the openai, anthropic
    and ollama SDKs) win; otherwise the exception type and message decide.
    """
    if isinstance(error, ProviderError):
        return error.kind
    if isinstance(error, (asyncio.TimeoutError, TimeoutError)):
        return ProviderErrorKind.TIMEOUT
    if isinstance(error, (json.JSONDecodeError, ValueError)):
        return ProviderErrorKind.MALFORMED

    status = getattr(error, "status_code", None)
    if isinstance(status, int):
        if status in (401, 403):
            return ProviderErrorKind.AUTH
        if status == 429:
            return ProviderErrorKind.RATE_LIMITED
        if status in (408, 504):
            return ProviderErrorKind.TIMEOUT
        if status >= 500:
            return ProviderErrorKind.UNAVAILABLE
        if status >= 400:
            return ProviderErrorKind.MALFORMED

    msg = str(error).lower()
    name = type(error).__name__.lower()

    if "timeout" in name or "timed out" in msg or "timeout" in msg:
        return ProviderErrorKind.TIMEOUT
    if "auth" in name or "permission" in name or "api key" in msg:
        return ProviderErrorKind.AUTH
    if "ratelimit" in name or "429" in msg or "rate limit" in msg:
        return ProviderErrorKind.RATE_LIMITED
    if "json" in msg or "parse" in msg or "decode" in msg:
        return ProviderErrorKind.MALFORMED
    return ProviderErrorKind.UNAVAILABLE


def to_provider_error(error: BaseException, provider: str) -> ProviderError:
    """Wrap an exception as ProviderError, keeping ProviderErrors as-is."""
    if isinstance(error, ProviderError):
        return error
    message = str(error) or type(error).__name__
    return ProviderError(classify_error(error), message, provider=provider)
