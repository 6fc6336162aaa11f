"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen and immutable
after initialization.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.messages import ErrorMessages
from ..domain.shared.types import CommandPrefixStr


class DiscordSettings(BaseModel):
    """Discord bot configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    token: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("token", "bot_token", "discord_token")
    )
    command_prefix: CommandPrefixStr = Field(
        default="!",
        validation_alias=AliasChoices("command_prefix", "prefix"),
    )


class AudioSettings(BaseModel):
    """Audio resolution and playback configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    default_volume: float = Field(default=0.5, ge=0.0, le=2.0)
    ytdlp_binary: str = Field(
        default="yt-dlp", min_length=1, validation_alias=AliasChoices("ytdlp_binary", "ytdlp_path")
    )
    ytdlp_format: str = "bestaudio"
    cookies_file: Path | None = Field(
        default=Path("cookies.txt"), validation_alias=AliasChoices("cookies_file", "cookies")
    )
    connect_timeout_s: float = Field(
        default=15.0,
        gt=0.0,
        le=120.0,
        validation_alias=AliasChoices("connect_timeout_s", "connect_timeout"),
    )
    search_limit: int = Field(default=5, ge=1, le=25)
    queue_page_size: int = Field(default=10, ge=1, le=25)
    ffmpeg_options: dict[str, str] = Field(
        default_factory=lambda: {
            "before_options": "",
            "options": "-vn",
        }
    )

    @property
    def usable_cookies_file(self) -> Path | None:
        """Return the cookie file only when it exists on disk."""
        if self.cookies_file is not None and self.cookies_file.is_file():
            return self.cookies_file
        return None


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, LOG_LEVEL, LOGGING_CONFIG (top-level)
    - DISCORD__TOKEN, DISCORD__COMMAND_PREFIX (nested with ``__``)
    - AUDIO__DEFAULT_VOLUME, AUDIO__COOKIES_FILE, AUDIO__YTDLP_BINARY, etc.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = "development"
    log_level: str = "INFO"
    logging_config: Path | None = None

    discord: DiscordSettings = Field(default_factory=DiscordSettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels))
        return v_upper


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
