"""Centralised configuration using pydantic-settings.

All environment variables are read through the Settings class.
Consumers call ``get_settings()`` to obtain a cached, validated instance.
Tests construct ``Settings(_env_file=None, ...)`` directly for isolation.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# src/marginalia/config.py  ->  parent x3  ->  project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


# ---------------------------------------------------------------------------
# Sub-models (one per configuration domain)
# ---------------------------------------------------------------------------
class NotesConfig(BaseModel):
    """Note buffer formatting options."""

    # Short month, day, 2-digit hour:minute, 12-hour clock ("Mar 04, 09:15 PM")
    timestamp_format: str = "%b %d, %I:%M %p"

    @field_validator("timestamp_format")
    @classmethod
    def _non_empty_format(cls, value: str) -> str:
        if not value.strip():
            msg = "NOTES__TIMESTAMP_FORMAT must not be empty"
            raise ValueError(msg)
        return value


class HighlightConfig(BaseModel):
    """Source-document highlight rendering options."""

    enabled: bool = True
    dark_mode: bool = False
    max_segments: int = 5

    @field_validator("max_segments")
    @classmethod
    def _positive_limit(cls, value: int) -> int:
        if value < 1:
            msg = "HIGHLIGHT__MAX_SEGMENTS must be at least 1"
            raise ValueError(msg)
        return value


class AppConfig(BaseModel):
    """Application runtime configuration."""

    log_dir: Path = Path("logs")


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Settings with automatic .env loading and type validation.

    Environment variables use double-underscore delimiter for nesting:
    ``NOTES__TIMESTAMP_FORMAT``, ``HIGHLIGHT__DARK_MODE``, ``APP__LOG_DIR``.
    """

    model_config = SettingsConfigDict(
        env_file=_PROJECT_ROOT / ".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    notes: NotesConfig = NotesConfig()
    highlight: HighlightConfig = HighlightConfig()
    app: AppConfig = AppConfig()


# ---------------------------------------------------------------------------
# Singleton access
# ---------------------------------------------------------------------------
@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Call ``get_settings.cache_clear()`` in tests to reset.
    """
    settings = Settings()

    env_file = settings.model_config.get("env_file")
    if env_file is not None and Path(str(env_file)).is_file():
        logger.info("Settings loaded .env from: %s", env_file)
    else:
        logger.debug("Settings: no .env file found, using env vars and defaults")

    return settings
