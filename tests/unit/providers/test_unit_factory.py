# tests/unit/providers/test_unit_factory.py — v1
"""Tests for providers/factory.py — provider selection and validation."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from goosereview.config.project import ProjectConfig, ProviderConfig
from goosereview.config.settings import ConfigurationError
from goosereview.providers.adapters.anthropic_adapter import AnthropicProvider
from goosereview.providers.adapters.custom_adapter import CustomEndpointProvider
from goosereview.providers.adapters.ollama_adapter import OllamaProvider
from goosereview.providers.adapters.openai_adapter import OpenAIProvider
from goosereview.providers.factory import ProviderHandle, create_provider, is_configured


def _config(provider: str, **sub) -> ProjectConfig:
    return ProjectConfig(ai_provider=provider, **{provider: ProviderConfig(**sub)})


class TestCreateProvider:
    def test_openai(self):
        provider = create_provider(_config("openai", api_key="sk-1", model="gpt-4o", timeout=30_000))
        assert isinstance(provider, OpenAIProvider)
        assert provider.provider_name == "openai"
        assert provider.model == "gpt-4o"
        assert provider.timeout_s == 30.0

    def test_openai_default_model(self):
        provider = create_provider(_config("openai", api_key="sk-1"))
        assert provider.model == "gpt-4"

    def test_custom(self):
        provider = create_provider(
            _config("custom", base_url="http://localhost:8000/v1", model="qwen"),
        )
        assert isinstance(provider, CustomEndpointProvider)
        assert provider.provider_name == "custom"
        assert provider.base_url == "http://localhost:8000/v1"

    def test_claude(self):
        provider = create_provider(_config("claude", api_key="sk-ant", model="claude-3-5-haiku"))
        assert isinstance(provider, AnthropicProvider)
        assert provider.provider_name == "claude"
        assert provider.model == "claude-3-5-haiku"

    def test_ollama(self):
        provider = create_provider(_config("ollama", base_url="http://gpu:11434", model="qwen2.5"))
        assert isinstance(provider, OllamaProvider)
        assert provider.host == "http://gpu:11434"
        assert provider.model == "qwen2.5"

    @pytest.mark.parametrize(
        "config",
        [
            ProjectConfig(ai_provider="gemini"),
            ProjectConfig(ai_provider="openai", openai=None),
            ProjectConfig(ai_provider="openai", openai=ProviderConfig(api_key="  ")),
            ProjectConfig(ai_provider="claude"),
            ProjectConfig(ai_provider="custom", custom=ProviderConfig(model="m")),
            ProjectConfig(ai_provider="custom", custom=ProviderConfig(base_url="http://x")),
            ProjectConfig(ai_provider="ollama", ollama=ProviderConfig(model="llama3")),
        ],
        ids=["unsupported", "no-sub", "blank-key", "claude-absent",
             "custom-no-url", "custom-no-model", "ollama-no-url"],
    )
    def test_invalid_config_raises(self, config):
        with pytest.raises(ConfigurationError):
            create_provider(config)
        assert not is_configured(config)

    def test_validation_before_import(self):
        with patch("goosereview.providers.factory._import_class") as import_class:
            with pytest.raises(ConfigurationError):
                create_provider(ProjectConfig(ai_provider="claude"))
        import_class.assert_not_called()

    def test_is_configured(self, project_config):
        assert is_configured(project_config)


class TestProviderHandle:
    def test_eager_failure(self):
        with pytest.raises(ConfigurationError):
            ProviderHandle(ProjectConfig(ai_provider="gemini"))

    def test_rebuild(self, project_config):
        handle = ProviderHandle(project_config)
        first = handle.provider
        assert handle.provider is first

        new = _config("claude", api_key="sk-ant")
        rebuilt = handle.rebuild(new)
        assert handle.provider is rebuilt
        assert handle.provider.provider_name == "claude"
        assert handle.config is new

    def test_rebuild_invalid_keeps_previous(self, project_config):
        handle = ProviderHandle(project_config)
        first = handle.provider
        with pytest.raises(ConfigurationError):
            handle.rebuild(ProjectConfig(ai_provider="gemini"))
        assert handle.provider is first
        assert handle.config is project_config

    def test_invalidate_rebuilds_lazily(self, project_config):
        handle = ProviderHandle(project_config)
        first = handle.provider
        handle.invalidate()
        second = handle.provider
        assert second is not first
        assert second.model == "gpt-4o"
