# src/goosereview/providers/base_provider.py — v1
"""Abstract analysis provider interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from goosereview.providers.models import AnalysisOptions, AnalysisResult


class BaseAnalysisProvider(ABC):
    """Unified interface for all AI review backends.

    Implementations must raise ProviderError (never a backend-specific
    exception) and must be safe to call concurrently from several workers.
    """

    @abstractmethod
    async def analyze(self, code: str, options: AnalysisOptions) -> AnalysisResult:
        """Review one file's contents."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (openai, custom, claude, ollama)."""

    @property
    @abstractmethod
    def model(self) -> str:
        """Model name sent to the backend."""

    @property
    @abstractmethod
    def timeout_s(self) -> float:
        """Per-request deadline enforced by the backend SDK, in seconds."""
