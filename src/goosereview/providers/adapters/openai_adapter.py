# src/goosereview/providers/adapters/openai_adapter.py — v1
"""OpenAI chat-completions adapter implementing BaseAnalysisProvider.

Uses the official openai SDK. JSON mode and a custom temperature are only
requested from models known to accept them.
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

# Matched as exact names or prefixes of the configured model
_JSON_MODE_MODELS = (
    "gpt-5", "gpt-5-mini", "gpt-5-nano", "gpt-5-pro", "gpt-5-codex",
    "gpt-4.1", "gpt-4.1-mini", "gpt-4.1-nano",
    "gpt-4-turbo", "gpt-4-turbo-preview", "gpt-4-1106-preview", "gpt-4-0125-preview",
    "gpt-4o", "gpt-4o-mini", "gpt-4o-2024-05-13", "gpt-4o-2024-08-06",
    "gpt-3.5-turbo-1106", "gpt-3.5-turbo-0125",
)
_FIXED_TEMPERATURE_MODELS = (
    "gpt-5", "gpt-5-mini", "gpt-5-nano", "gpt-5-pro", "gpt-5-codex", "chatgpt-5",
)

ANALYSIS_TEMPERATURE = 0.3


class OpenAIProvider(BaseAnalysisProvider):
    """OpenAI GPT review provider."""

    def __init__(
        self,
        model: str = "gpt-4",
        api_key: str = "",
        timeout_s: float = 60.0,
        base_url: str | None = None,
    ) -> None:
        import openai

        self._model = model
        self._timeout_s = timeout_s
        self._client = openai.AsyncOpenAI(
            api_key=api_key, base_url=base_url, timeout=timeout_s,
        )

    async def analyze(self, code: str, options: AnalysisOptions) -> AnalysisResult:
        kwargs = self._build_kwargs(build_review_prompt(code, options))

        t0 = time.monotonic()
        try:
            resp = await self._client.chat.completions.create(**kwargs)
        except Exception as e:
            raise to_provider_error(e, self.provider_name) from e
        latency = int((time.monotonic() - t0) * 1000)
        logger.debug(
            "%s answered for %s in %dms", self.provider_name, options.file_path, latency,
        )

        content = resp.choices[0].message.content if resp.choices else None
        if not content:
            raise ProviderError(
                ProviderErrorKind.MALFORMED,
                f"No response from {self.provider_name}",
                provider=self.provider_name,
            )
        try:
            return parse_review(content)
        except ValueError as e:
            raise to_provider_error(e, self.provider_name) from e

    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def model(self) -> str:
        return self._model

    @property
    def timeout_s(self) -> float:
        return self._timeout_s

    @property
    def supports_json_mode(self) -> bool:
        return self._model.startswith(_JSON_MODE_MODELS)

    @property
    def supports_custom_temperature(self) -> bool:
        return not self._model.startswith(_FIXED_TEMPERATURE_MODELS)

    # --- Internal helpers ---

    def _build_kwargs(self, prompt: str) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
        }
        if self.supports_custom_temperature:
            kwargs["temperature"] = ANALYSIS_TEMPERATURE
        if self.supports_json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        return kwargs
