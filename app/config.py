"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    secret_key: str = Field(
        default="change-me",
        description="Secret key used to verify the JWT bearer tokens issued by the auth service",
        min_length=1,
    )
    environment: str = Field(
        default="development",
        description="Deployment environment; error details are hidden in production",
    )
    log_level: str = Field(default="INFO", description="Root logging level")
    app_timezone: str = Field(
        default="UTC",
        description="IANA timezone used for stored timestamps",
    )
    notification_retention_days: int = Field(
        default=30,
        description="Unread notifications older than this are marked read on the next insert",
        gt=0,
    )
    notifications_default_page_size: int = Field(
        default=20, description="Default ``limit`` for notification listings", gt=0
    )
    notifications_max_page_size: int = Field(
        default=100, description="Upper bound applied to the ``limit`` parameter", gt=0
    )
    websocket_url: str = Field(
        default="/api/notifications/ws",
        description="Websocket URL advertised to subscribing clients",
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Origins allowed to call the API from a browser",
    )

    @field_validator("environment")
    @classmethod
    def _normalize_environment(cls, value: str) -> str:
        return value.strip().lower()

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
