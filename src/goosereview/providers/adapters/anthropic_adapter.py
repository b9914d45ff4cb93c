# src/goosereview/providers/adapters/anthropic_adapter.py — v1
"""Anthropic Claude adapter implementing BaseAnalysisProvider.

Uses the official anthropic SDK. Claude has no JSON mode; the reply is
parsed from the first text block, fenced or not.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from goosereview.providers.base_provider import BaseAnalysisProvider
from goosereview.providers.errors import ProviderError, ProviderErrorKind, to_provider_error
from goosereview.providers.models import AnalysisOptions, AnalysisResult
from goosereview.providers.prompt import SYSTEM_PROMPT, build_review_prompt, parse_review

logger = logging.getLogger(__name__)


class AnthropicProvider(BaseAnalysisProvider):
    """Adapter for Anthropic Claude models."""

    def __init__(
        self,
        model: str = "claude-sonnet-4-20250514",
        api_key: str | None = None,
        timeout_s: float = 60.0,
        max_tokens: int = 4096,
    ) -> None:
        import anthropic

        self._model = model
        self._timeout_s = timeout_s
        self._max_tokens = max_tokens
        self._client = anthropic.AsyncAnthropic(api_key=api_key or "", timeout=timeout_s)

    async def analyze(self, code: str, options: AnalysisOptions) -> AnalysisResult:
        """Review one file via the Messages API."""
        kwargs: dict[str, Any] = {
            "model": self._model,
            "max_tokens": self._max_tokens,
            "temperature": 0.3,
            "system": SYSTEM_PROMPT,
            "messages": [{"role": "user", "content": build_review_prompt(code, options)}],
        }

        start = time.monotonic()
        try:
            response = await self._client.messages.create(**kwargs)
        except Exception as e:
            raise to_provider_error(e, self.provider_name) from e
        latency_ms = int((time.monotonic() - start) * 1000)
        logger.debug("claude answered for %s in %dms", options.file_path, latency_ms)

        content = self._extract_content(response)
        if not content:
            raise ProviderError(
                ProviderErrorKind.MALFORMED, "No text in Claude response",
                provider=self.provider_name,
            )
        try:
            return parse_review(content)
        except ValueError as e:
            raise to_provider_error(e, self.provider_name) from e

    @property
    def provider_name(self) -> str:
        return "claude"

    @property
    def model(self) -> str:
        return self._model

    @property
    def timeout_s(self) -> float:
        return self._timeout_s

    @staticmethod
    def _extract_content(response: Any) -> str:
        for block in response.content:
            if getattr(block, "type", None) == "text":
                return block.text
        return ""
