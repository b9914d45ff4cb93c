# src/goosereview/providers/adapters/ollama_adapter.py — v1
"""Ollama local model adapter implementing BaseAnalysisProvider."""

from __future__ import annotations

import logging
import time
from typing import Any

from goosereview.providers.base_provider import BaseAnalysisProvider
from goosereview.providers.errors import ProviderError, ProviderErrorKind, to_provider_error
from goosereview.providers.models import AnalysisOptions, AnalysisResult
from goosereview.providers.prompt import SYSTEM_PROMPT, build_review_prompt, parse_review

logger = logging.getLogger(__name__)

DEFAULT_HOST = "http://localhost:11434"


class OllamaProvider(BaseAnalysisProvider):
    """Ollama local inference provider."""

    def __init__(
        self,
        model: str = "llama3",
        host: str | None = None,
        timeout_s: float = 60.0,
    ) -> None:
        import ollama

        self._model = model
        self._host = host or DEFAULT_HOST
        self._timeout_s = timeout_s
        self._client = ollama.AsyncClient(host=self._host, timeout=timeout_s)

    async def analyze(self, code: str, options: AnalysisOptions) -> AnalysisResult:
        kwargs: dict[str, Any] = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_review_prompt(code, options)},
            ],
            "options": {"temperature": 0.3},
            "format": "json",
        }

        t0 = time.monotonic()
        try:
            resp = await self._client.chat(**kwargs)
        except Exception as e:
            raise to_provider_error(e, self.provider_name) from e
        latency = int((time.monotonic() - t0) * 1000)
        logger.debug("ollama answered for %s in %dms", options.file_path, latency)

        content = resp["message"]["content"] if resp.get("message") else None
        if not content:
            raise ProviderError(
                ProviderErrorKind.MALFORMED, "No response from Ollama",
                provider=self.provider_name,
            )
        try:
            return parse_review(content)
        except ValueError as e:
            raise to_provider_error(e, self.provider_name) from e

    @property
    def provider_name(self) -> str:
        return "ollama"

    @property
    def model(self) -> str:
        return self._model

    @property
    def timeout_s(self) -> float:
        return self._timeout_s

    @property
    def host(self) -> str:
        return self._host
