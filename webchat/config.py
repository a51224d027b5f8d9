"""
Application Configuration

Pydantic-based settings management using environment variables.
Supports nested configuration, validation, and caching.

Usage:
    from webchat.config import get_settings

    settings = get_settings()
    print(settings.webhook.url)
    print(settings.storage.path)
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class WebhookSettings(BaseSettings):
    """Remote webhook configuration."""

    url: AnyHttpUrl | None = Field(
        None,
        description="Webhook endpoint that produces assistant replies",
    )
    route: str = Field(
        default="general",
        min_length=1,
        description="Route name sent with every webhook request",
    )
    timeout: float = Field(
        default=30.0,
        gt=0,
        description="Request timeout in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="WEBHOOK_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("url", mode="before")
    @classmethod
    def normalize_url(cls, v: str | AnyHttpUrl | None) -> str | AnyHttpUrl | None:
        """Treat empty strings as missing."""
        if v == "":
            return None
        return v


class StorageSettings(BaseSettings):
    """Local key-value storage configuration."""

    path: Path = Field(
        default=Path.home() / ".webchat" / "local_storage.json",
        description="JSON file backing the local key-value store",
    )

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("path")
    @classmethod
    def expand_path(cls, v: Path) -> Path:
        return v.expanduser()


class RenderSettings(BaseSettings):
    """Message rendering configuration."""

    escape_html: bool = Field(
        default=False,
        description="HTML-escape raw message text before formatting",
    )

    model_config = SettingsConfigDict(
        env_prefix="RENDER_",
        env_file=".env",
        extra="ignore",
    )


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Application log level",
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format",
    )
    date_format: str = Field(
        default="%Y-%m-%d %H:%M:%S",
        description="Log timestamp format",
    )
    file: Path | None = Field(
        default=None,
        description="Optional log file path (None = stderr only)",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        extra="ignore",
    )

    def configure(self) -> None:
        """Configure Python logging with these settings."""
        handlers: list[logging.Handler] = [logging.StreamHandler()]

        if self.file:
            self.file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(self.file))

        logging.basicConfig(
            level=getattr(logging, self.level),
            format=self.format,
            datefmt=self.date_format,
            handlers=handlers,
            force=True,  # Override any existing configuration
        )


class Settings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    Settings are nested by domain (webhook, storage, render, logging).

    Environment Variables:
        APP_NAME: Application name shown in the interactive banner
        DEBUG: Show application logs in the CLI without --verbose
        WEBHOOK_*: Remote webhook configuration (see WebhookSettings)
        STORAGE_*: Local storage configuration (see StorageSettings)
        RENDER_*: Rendering configuration (see RenderSettings)
        LOG_*: Logging configuration (see LoggingSettings)

    Example:
        >>> settings = get_settings()
        >>> settings.webhook.route
        'general'
        >>> settings.debug
        False
    """

    app_name: str = Field(
        default="WebChat",
        description="Application name",
    )
    debug: bool = Field(
        default=False,
        description="Show application logs in the CLI",
    )

    # Nested settings
    webhook: WebhookSettings = Field(default_factory=WebhookSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    render: RenderSettings = Field(default_factory=RenderSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def model_post_init(self, __context) -> None:
        """Log configuration on initialization."""
        logger = logging.getLogger(__name__)
        logger.debug(
            f"Settings loaded for {self.app_name}",
            extra={
                "debug": self.debug,
                "webhook_configured": self.webhook.url is not None,
                "storage_path": str(self.storage.path),
            },
        )


_DOTENV_PATH = Path(__file__).resolve().parents[1] / ".env"


def _apply_dotenv_precedence() -> None:
    env_source = os.getenv("WEBCHAT_ENV_SOURCE", "dotenv").lower()
    if env_source not in {"dotenv", "envfile", "file"}:
        return
    if _DOTENV_PATH.exists():
        load_dotenv(_DOTENV_PATH, override=True)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Singleton settings instance

    Example:
        >>> from webchat.config import get_settings
        >>> settings = get_settings()
        >>> print(settings.webhook.url)
    """
    _apply_dotenv_precedence()
    return Settings()


def clear_settings_cache() -> None:
    """
    Clear the settings cache.

    Useful for testing when you need to reload settings with different
    environment variables.
    """
    get_settings.cache_clear()
