"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen and immutable
after initialization.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.music.policies import (
    CACHE_KEY_PREFIX,
    DEFAULT_CACHE_TTL_SECONDS,
    DEFAULT_VOLUME_SCALAR,
    EXPIRY_SAFETY_MARGIN_SECONDS,
    MAX_DURATION_SECONDS,
)
from ..domain.shared.messages import ErrorMessages
from ..domain.voting.services import VotingDomainService


class AudioSettings(BaseModel):
    """Admission and playback configuration."""

    model_config = SettingsConfigDict(frozen=True, strict=True, populate_by_name=True)

    default_volume: float = Field(default=DEFAULT_VOLUME_SCALAR, ge=0.0)
    max_duration_seconds: int = Field(
        default=MAX_DURATION_SECONDS,
        ge=1,
        validation_alias=AliasChoices("max_duration_seconds", "max_duration"),
    )
    expiry_margin_seconds: int = Field(default=EXPIRY_SAFETY_MARGIN_SECONDS, ge=0)
    ffmpeg_options: dict[str, str] = Field(
        default_factory=lambda: {
            "before_options": "-reconnect 1 -reconnect_streamed 1 -reconnect_delay_max 5",
            "options": "-vn",
        }
    )


class CacheSettings(BaseModel):
    """Resolver cache configuration."""

    model_config = SettingsConfigDict(frozen=True, strict=True, populate_by_name=True)

    backend: Literal["memory", "sqlite"] = "memory"
    sqlite_path: str = Field(
        default="data/resolver_cache.db",
        validation_alias=AliasChoices("sqlite_path", "path"),
    )
    default_ttl_seconds: int = Field(
        default=DEFAULT_CACHE_TTL_SECONDS,
        ge=1,
        validation_alias=AliasChoices("default_ttl_seconds", "ttl"),
    )
    key_prefix: str = Field(default=CACHE_KEY_PREFIX, min_length=1)
    max_entries: int = Field(default=500, ge=1)
    purge_interval_seconds: int = Field(default=3600, ge=0)


class YtDlpSettings(BaseModel):
    """yt-dlp backend configuration."""

    model_config = SettingsConfigDict(frozen=True, strict=True)

    retries: int = Field(default=3, ge=0)
    socket_timeout: int = Field(default=10, ge=1)
    forceipv4: bool = True


class VotingSettings(BaseModel):
    """Voting configuration."""

    model_config = SettingsConfigDict(frozen=True, strict=True)

    skip_quorum: float = Field(default=VotingDomainService.SKIP_QUORUM, gt=0.0, le=1.0)
    small_audience_size: int = Field(default=VotingDomainService.SMALL_AUDIENCE_SIZE, ge=0)


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - AUDIO__MAX_DURATION_SECONDS, AUDIO__DEFAULT_VOLUME
    - CACHE__BACKEND, CACHE__SQLITE_PATH, CACHE__DEFAULT_TTL_SECONDS,
      CACHE__PURGE_INTERVAL_SECONDS
    - VOTING__SKIP_QUORUM, VOTING__SMALL_AUDIENCE_SIZE
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        strict=True,
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    audio: AudioSettings = Field(default_factory=AudioSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    ytdlp: YtDlpSettings = Field(default_factory=YtDlpSettings)
    voting: VotingSettings = Field(default_factory=VotingSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels)
            )
        return v_upper

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
