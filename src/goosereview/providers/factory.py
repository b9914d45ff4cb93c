# src/goosereview/providers/factory.py — v1
"""Factory: instantiate the analysis provider selected by a ProjectConfig.

The provider set is closed. Selection and credential validation happen
once, before any file is scheduled, so a misconfigured project fails fast
with ConfigurationError instead of failing every file.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Callable

from goosereview.config.project import ProjectConfig, ProviderConfig
from goosereview.config.settings import ConfigurationError
from goosereview.providers.base_provider import BaseAnalysisProvider

logger = logging.getLogger(__name__)

# Registry of provider id → adapter class path (lazy import).
_PROVIDER_REGISTRY: dict[str, str] = {
    "openai": "goosereview.providers.adapters.openai_adapter.OpenAIProvider",
    "custom": "goosereview.providers.adapters.custom_adapter.CustomEndpointProvider",
    "claude": "goosereview.providers.adapters.anthropic_adapter.AnthropicProvider",
    "ollama": "goosereview.providers.adapters.ollama_adapter.OllamaProvider",
}


def _openai_kwargs(sub: ProviderConfig) -> dict[str, object]:
    if not sub.api_key.strip():
        raise ConfigurationError("OpenAI provider requires an API key")
    return {"api_key": sub.api_key, "model": sub.model or "gpt-4", "timeout_s": sub.timeout_s}


def _custom_kwargs(sub: ProviderConfig) -> dict[str, object]:
    if not sub.base_url.strip():
        raise ConfigurationError("Custom provider requires a base URL")
    if not sub.model.strip():
        raise ConfigurationError("Custom provider requires a model name")
    return {
        "base_url": sub.base_url,
        "model": sub.model,
        "api_key": sub.api_key or None,
        "timeout_s": sub.timeout_s,
    }


def _claude_kwargs(sub: ProviderConfig) -> dict[str, object]:
    if not sub.api_key.strip():
        raise ConfigurationError("Claude provider requires an API key")
    kwargs: dict[str, object] = {"api_key": sub.api_key, "timeout_s": sub.timeout_s}
    if sub.model:
        kwargs["model"] = sub.model
    return kwargs


def _ollama_kwargs(sub: ProviderConfig) -> dict[str, object]:
    if not sub.base_url.strip():
        raise ConfigurationError("Ollama provider requires a base URL")
    kwargs: dict[str, object] = {"host": sub.base_url, "timeout_s": sub.timeout_s}
    if sub.model:
        kwargs["model"] = sub.model
    return kwargs


_KWARGS_BUILDERS: dict[str, Callable[[ProviderConfig], dict[str, object]]] = {
    "openai": _openai_kwargs,
    "custom": _custom_kwargs,
    "claude": _claude_kwargs,
    "ollama": _ollama_kwargs,
}


def is_configured(config: ProjectConfig) -> bool:
    """Whether the active provider id is supported and its sub-config complete."""
    try:
        _resolve(config)
    except ConfigurationError:
        return False
    return True


def create_provider(config: ProjectConfig) -> BaseAnalysisProvider:
    """Instantiate the adapter for config.ai_provider.

    Raises:
        ConfigurationError: If the provider id is unknown or its
            sub-config is missing required fields.
    """
    provider_id, kwargs = _resolve(config)
    adapter_cls = _import_class(_PROVIDER_REGISTRY[provider_id])
    logger.debug("Creating provider: %s, model=%s", provider_id, kwargs.get("model"))
    return adapter_cls(**kwargs)


def _resolve(config: ProjectConfig) -> tuple[str, dict[str, object]]:
    provider_id = config.ai_provider
    if provider_id not in _PROVIDER_REGISTRY:
        raise ConfigurationError(
            f"Unsupported AI provider: {provider_id!r}. "
            f"Available: {', '.join(sorted(_PROVIDER_REGISTRY))}"
        )
    sub = config.active_provider_config()
    if sub is None:
        raise ConfigurationError(f"No configuration for provider {provider_id!r}")
    return provider_id, _KWARGS_BUILDERS[provider_id](sub)


def _import_class(class_path: str) -> type:
    """Import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)


class ProviderHandle:
    """Caller-owned provider instance.

    Built eagerly so configuration errors surface at construction. Callers
    that change the project configuration call rebuild() or invalidate();
    an invalidated handle rebuilds lazily on next access.
    """

    def __init__(self, config: ProjectConfig) -> None:
        self._config = config
        self._provider: BaseAnalysisProvider | None = create_provider(config)

    @property
    def config(self) -> ProjectConfig:
        return self._config

    @property
    def provider(self) -> BaseAnalysisProvider:
        if self._provider is None:
            self._provider = create_provider(self._config)
        return self._provider

    def rebuild(self, config: ProjectConfig) -> BaseAnalysisProvider:
        """Replace the provider for a new configuration.

        The previous provider is kept if the new configuration is invalid.
        """
        provider = create_provider(config)
        self._config = config
        self._provider = provider
        logger.info("Provider rebuilt: %s", provider.provider_name)
        return provider

    def invalidate(self) -> None:
        self._provider = None
