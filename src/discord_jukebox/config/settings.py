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
from ..domain.shared.types import CommandPrefixStr, NonEmptyStr, PositiveFloat, RefreshIntervalSeconds


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
    presence_text: NonEmptyStr = "!play"
    presence_status: Literal["online", "idle", "dnd", "invisible"] = "dnd"
    voice_connect_timeout: PositiveFloat = 10.0


class SpotifySettings(BaseModel):
    """Spotify Web API client-credentials configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    client_id: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("client_id", "spotify_client_id")
    )
    client_secret: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("client_secret", "spotify_client_secret"),
    )
    token_refresh_seconds: RefreshIntervalSeconds = Field(
        default=3600,
        validation_alias=AliasChoices("token_refresh_seconds", "refresh_interval"),
    )
    request_timeout: PositiveFloat = 5.0

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id.get_secret_value() and self.client_secret.get_secret_value())


class AudioSettings(BaseModel):
    """Audio playback configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    ffmpeg_options: dict[str, str] = Field(
        default_factory=lambda: {
            "before_options": "-reconnect 1 -reconnect_streamed 1 -reconnect_delay_max 5",
            "options": "-vn",
        }
    )
    # Audio only, highest quality first.
    ytdlp_format: NonEmptyStr = "bestaudio/best"


# Repository root when running from a source checkout.
DEFAULT_LOG_CONFIG_PATH = Path(__file__).resolve().parents[3] / "logging_config.json"


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL, LOG_CONFIG_PATH (top-level)
    - DISCORD__TOKEN, DISCORD__COMMAND_PREFIX, DISCORD__PRESENCE_TEXT, ...
    - SPOTIFY__CLIENT_ID, SPOTIFY__CLIENT_SECRET, SPOTIFY__TOKEN_REFRESH_SECONDS
    - AUDIO__YTDLP_FORMAT
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"
    log_config_path: Path = DEFAULT_LOG_CONFIG_PATH

    discord: DiscordSettings = Field(default_factory=DiscordSettings)
    spotify: SpotifySettings = Field(default_factory=SpotifySettings)
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

    @property
    def effective_log_level(self) -> str:
        """DEBUG forces debug logging regardless of LOG_LEVEL."""
        return "DEBUG" if self.debug else self.log_level


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
