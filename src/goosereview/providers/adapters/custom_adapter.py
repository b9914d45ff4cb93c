# src/goosereview/providers/adapters/custom_adapter.py — v1
"""Adapter for self-hosted OpenAI-compatible endpoints (vLLM, LM Studio, ...)."""

from __future__ import annotations

from typing import Any

from goosereview.providers.adapters.openai_adapter import ANALYSIS_TEMPERATURE, OpenAIProvider


class CustomEndpointProvider(OpenAIProvider):
    """OpenAI wire protocol against a user-supplied base URL.

    Local services often ignore the key, so a placeholder is sent when none
    is configured. JSON mode is never requested.
    """

    def __init__(
        self,
        base_url: str,
        model: str = "instruct",
        api_key: str | None = None,
        timeout_s: float = 60.0,
    ) -> None:
        super().__init__(
            model=model or "instruct",
            api_key=api_key or "not-needed",
            timeout_s=timeout_s,
            base_url=base_url,
        )
        self._base_url = base_url

    @property
    def provider_name(self) -> str:
        return "custom"

    @property
    def base_url(self) -> str:
        return self._base_url

    def _build_kwargs(self, prompt: str) -> dict[str, Any]:
        kwargs = super()._build_kwargs(prompt)
        kwargs.pop("response_format", None)
        kwargs["temperature"] = ANALYSIS_TEMPERATURE
        return kwargs
