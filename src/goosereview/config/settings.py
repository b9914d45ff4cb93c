# src/goosereview/config/settings.py — v1
"""Typed process-level configuration loaded from environment / .env.

Per-project configuration (provider selection, ignore patterns, extensions)
lives in config/project.py; this module holds the knobs that belong to the
running process: logging, insight storage backend, scheduling defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is missing or internally inconsistent.

    Fatal for a batch: always raised before any file is scheduled.
    """


class Settings(BaseSettings):
    """Application settings loaded from GOOSE_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="GOOSE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # === Insight store ===
    state_dir: str = ".code-review"
    insight_backend: Literal["json", "sqlite"] = "json"

    # === Scheduling ===
    default_concurrency: int = 1
    file_timeout_s: float | None = None
    retry_max_attempts: int = 0
    retry_base_delay_s: float = 2.0

    # === Discovery ===
    load_gitignore: bool = True

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Reject values the scheduler cannot honor."""
        errors: list[str] = []

        if self.default_concurrency < 1:
            errors.append("GOOSE_DEFAULT_CONCURRENCY must be >= 1")
        if self.file_timeout_s is not None and self.file_timeout_s <= 0:
            errors.append("GOOSE_FILE_TIMEOUT_S must be > 0")
        if self.retry_max_attempts < 0:
            errors.append("GOOSE_RETRY_MAX_ATTEMPTS must be >= 0")
        if self.retry_base_delay_s < 0:
            errors.append("GOOSE_RETRY_BASE_DELAY_S must be >= 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    def state_path(self, project_root: Path) -> Path:
        """Return the tool's state directory inside a project."""
        return Path(project_root) / self.state_dir


def load_settings(**overrides: object) -> Settings:
    """Load settings from environment with optional overrides.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
