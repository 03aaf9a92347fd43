"""Configuration management using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PUSHAUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Credentials
    app_id: str | None = Field(
        default=None,
        description="Application ID used in REST API paths",
    )
    app_key: str | None = Field(
        default=None,
        description="Public application key, sent in the clear",
    )
    app_secret: str | None = Field(
        default=None,
        description="Application secret used as the HMAC key (never transmitted)",
    )

    # REST API
    api_host: str = Field(
        default="api.pusherapp.com",
        description="Host of the messaging REST API",
    )
    api_scheme: Literal["http", "https"] = Field(
        default="https",
        description="Scheme used when rendering signed URLs",
    )

    # Auth server
    server_host: str = Field(
        default="0.0.0.0",
        description="Host for the auth HTTP server",
    )
    server_port: int = Field(
        default=8090,
        description="Port for the auth HTTP server",
    )
    auth_endpoint_path: str = Field(
        default="/pusher/auth",
        description="Path of the channel authentication endpoint",
    )
    signed_path_prefixes: tuple[str, ...] = Field(
        default=("/apps/",),
        description="Path prefixes that require a signed REST request",
    )
    auth_exempt_paths: tuple[str, ...] = Field(
        default=("/health",),
        description="Paths exempt from signature verification",
    )
    auth_timestamp_ttl_seconds: int = Field(
        default=600,
        description="Max age (seconds) of auth_timestamp on signed requests",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Log level for structlog and the root logger",
    )
    log_json: bool = Field(
        default=False,
        description="Emit JSON log lines instead of console output",
    )

    @property
    def api_base_url(self) -> str:
        """Base URL of the REST API."""
        return f"{self.api_scheme}://{self.api_host}"


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
