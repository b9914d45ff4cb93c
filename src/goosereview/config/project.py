# src/goosereview/config/project.py — v1
"""Per-project configuration: provider selection, ignore patterns, extensions.

Stored as camelCase JSON in <project>/.code-review/config.json. Loading
deep-merges the file over DEFAULT_CONFIG so that newly introduced fields
always carry a default, and provider sub-configs are merged field by field.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from goosereview.config.settings import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_DIR = ".code-review"
CONFIG_FILE = "config.json"

SUPPORTED_PROVIDERS: tuple[str, ...] = ("openai", "custom", "claude", "ollama")

DEFAULT_IGNORE_PATTERNS: list[str] = [
    "node_modules",
    ".git",
    "dist",
    "build",
    ".next",
    "coverage",
]

DEFAULT_ANALYZABLE_EXTENSIONS: list[str] = [
    # JavaScript/TypeScript
    ".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs",
    ".vue",
    ".py", ".pyw",
    ".java",
    ".go",
    ".rs",
    # C/C++
    ".c", ".cpp", ".cc", ".cxx", ".h", ".hpp", ".hxx",
    ".cs",
    ".php",
    ".rb",
    ".swift",
    ".kt", ".kts",
    ".scala",
    ".r", ".R",
    ".dart",
    # Markup and styles
    ".html", ".htm", ".css", ".scss", ".sass", ".less",
    ".sql",
    ".sh", ".bash", ".zsh",
    # Config files (may contain logic)
    ".yaml", ".yml", ".json",
]

DEFAULT_MAX_FILE_SIZE = 5 * 1024 * 1024
DEFAULT_TIMEOUT_MS = 60_000


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProviderConfig(_CamelModel):
    """Credentials and endpoint for one provider."""

    api_key: str = ""
    model: str = ""
    base_url: str = ""
    timeout: int = DEFAULT_TIMEOUT_MS  # milliseconds

    @property
    def timeout_s(self) -> float:
        return self.timeout / 1000.0


class ProjectConfig(_CamelModel):
    """Resolved project configuration consumed read-only by the engine."""

    ai_provider: str = "openai"
    openai: ProviderConfig | None = Field(
        default_factory=lambda: ProviderConfig(model="gpt-4")
    )
    custom: ProviderConfig | None = None
    claude: ProviderConfig | None = None
    ollama: ProviderConfig | None = None
    ignore_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORE_PATTERNS)
    )
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    analyzable_file_extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ANALYZABLE_EXTENSIONS)
    )

    def active_provider_config(self) -> ProviderConfig | None:
        """Sub-config of the selected provider, or None if absent/unknown."""
        if self.ai_provider not in SUPPORTED_PROVIDERS:
            return None
        return getattr(self, self.ai_provider)


DEFAULT_CONFIG = ProjectConfig()


def config_path(project_root: Path) -> Path:
    return Path(project_root) / CONFIG_DIR / CONFIG_FILE


def merge_config(current: ProjectConfig, updates: dict[str, Any]) -> ProjectConfig:
    """Deep-merge a camelCase (or snake_case) update dict into a config.

    Top-level lists replace wholesale; provider sub-configs merge per field
    so that updating a model does not drop an existing API key.
    """
    merged = current.model_dump(by_alias=True)
    for key, value in updates.items():
        field_name = _field_name(key)
        if field_name is None:
            logger.debug("Ignoring unknown config key %r", key)
            continue
        alias = ProjectConfig.model_fields[field_name].alias or field_name
        if field_name in SUPPORTED_PROVIDERS and isinstance(value, dict):
            base = merged.get(alias) or {}
            value = {to_camel(k) if "_" in k else k: v for k, v in value.items()}
            merged[alias] = {**base, **value}
        else:
            merged[alias] = value

    try:
        return ProjectConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid project configuration: {exc}") from exc


def load_project_config(project_root: Path) -> ProjectConfig:
    """Load <root>/.code-review/config.json merged over the defaults.

    A missing file yields the defaults.

    Raises:
        ConfigurationError: If the file is unreadable, not JSON, or invalid.
    """
    path = config_path(project_root)
    if not path.exists():
        logger.debug("No project config at %s, using defaults", path)
        return DEFAULT_CONFIG.model_copy(deep=True)

    try:
        loaded = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Cannot read {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise ConfigurationError(f"{path} must contain a JSON object")

    return merge_config(DEFAULT_CONFIG, loaded)


def save_project_config(project_root: Path, config: ProjectConfig) -> Path:
    """Write the config back as camelCase JSON."""
    path = config_path(project_root)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        config.model_dump_json(by_alias=True, indent=2, exclude_none=True),
        encoding="utf-8",
    )
    return path


def _field_name(key: str) -> str | None:
    """Map a camelCase alias or snake_case name to a ProjectConfig field."""
    if key in ProjectConfig.model_fields:
        return key
    for name, info in ProjectConfig.model_fields.items():
        if info.alias == key:
            return name
    return None
