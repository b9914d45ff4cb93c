# src/goosereview/logging/context.py — v1
"""Contextual logging support — attach run_id, file_path, provider to log records.

Context variables are copied into every asyncio task at creation, so each
batch worker can set its own file_path without affecting its siblings.
"""

from __future__ import annotations

import contextvars
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

_run_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "run_id", default=None
)
_file_path: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "file_path", default=None
)
_provider: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "provider", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    run_id: str | None = None
    file_path: str | None = None
    provider: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        run_id=_run_id.get(),
        file_path=_file_path.get(),
        provider=_provider.get(),
    )


def set_run_context(run_id: str, provider: str | None = None) -> None:
    """Set batch-level context (called once per run)."""
    _run_id.set(run_id)
    _provider.set(provider)


@contextmanager
def file_context(file_path: str) -> Iterator[None]:
    """Scope file_path to the current worker for the duration of one file."""
    token = _file_path.set(file_path)
    try:
        yield
    finally:
        _file_path.reset(token)


def clear_context() -> None:
    """Reset all context variables."""
    _run_id.set(None)
    _file_path.set(None)
    _provider.set(None)
