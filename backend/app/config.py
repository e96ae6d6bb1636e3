"""
Video Link Resolver Configuration Management Module

This module provides configuration management for the resolver service using
Pydantic Settings. It loads and validates the environment variables required for:
- Application settings (name, environment, debug mode, logging)
- Outbound HTTP behaviour (timeouts, redirects, User-Agent, Referer)
- Resolution strategy ordering
- Media proxy response headers

All settings support environment variable overrides and .env file loading with
validation and type safety.
"""

from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


# Mobile browser identity used for share pages, provider APIs and media fetches.
DEFAULT_MOBILE_USER_AGENT: str = (
    "Mozilla/5.0 (Linux; Android 10; K) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Mobile Safari/537.36"
)

DEFAULT_STRATEGY_ORDER: list[str] = [
    "douyin_share_page",
    "douyin_item_api",
    "tikwm",
    "pearktrue",
    "vvhan",
    "lolimi",
    "douyin_hybrid",
]


class Settings(BaseSettings):
    """
    Configuration settings for the Video Link Resolver service.

    Configuration Categories:
    - Application: Core app settings like name, environment, debug mode
    - HTTP: Outbound request timeout, redirect limit and identity headers
    - Resolution: Ordered list of enabled strategies and the overall time limit
    - Proxy: Cache headers for streamed media

    Example usage:
        ```python
        from app.config import Settings

        settings = Settings()
        print(f"Strategies: {settings.enabled_strategies}")
        ```
    """

    # =========================================================================
    # Application Settings
    # =========================================================================

    app_name: str = Field(
        default="video-link-resolver",
        description="Application name displayed in API documentation and logs",
    )

    app_env: str = Field(
        default="development",
        description="Application environment (development, staging, production, testing)",
    )

    debug: bool = Field(default=False, description="Enable debug mode with hot-reload")

    log_level: str = Field(
        default="info", description="Logging level (debug, info, warning, error, critical)"
    )

    json_logs: bool = Field(
        default=False, description="Emit structured JSON logs instead of plain text"
    )

    host: str = Field(default="0.0.0.0", description="Host address for the API server to bind to")

    port: int = Field(default=8000, description="Port number for the API server", ge=1, le=65535)

    cors_origins: Annotated[list[str], NoDecode] = Field(
        default=["*"],
        description="List of allowed CORS origins for frontend access",
    )

    # =========================================================================
    # Outbound HTTP Settings
    # =========================================================================

    request_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout applied to every outbound HTTP call",
        ge=1.0,
        le=60.0,
    )

    max_redirects: int = Field(
        default=10, description="Maximum redirects followed per outbound call", ge=0, le=30
    )

    mobile_user_agent: str = Field(
        default=DEFAULT_MOBILE_USER_AGENT,
        description="User-Agent sent to share pages, provider APIs and media hosts",
    )

    douyin_referer: str = Field(
        default="https://www.douyin.com/",
        description="Referer sent when fetching Douyin share pages and item API",
    )

    share_page_base_url: str = Field(
        default="https://www.iesdouyin.com/share",
        description="Base URL for canonical Douyin share page templates",
    )

    # =========================================================================
    # Resolution Settings
    # =========================================================================

    enabled_strategies: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_STRATEGY_ORDER),
        description="Resolution strategies in priority order",
    )

    resolve_timeout_seconds: float = Field(
        default=60.0,
        description="Upper bound for a whole resolution across all strategies",
        ge=1.0,
    )

    disconnect_poll_interval_seconds: float = Field(
        default=0.5,
        description="How often a running resolution checks for client disconnect",
        gt=0.0,
    )

    # =========================================================================
    # Proxy Settings
    # =========================================================================

    proxy_cache_max_age: int = Field(
        default=3600, description="Cache-Control max-age for proxied media in seconds", ge=0
    )

    # =========================================================================
    # Model Configuration
    # =========================================================================

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that log_level is a valid logging level."""
        valid_levels = {"debug", "info", "warning", "error", "critical"}
        normalized = v.lower()
        if normalized not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {', '.join(valid_levels)}")
        return normalized

    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        """Validate that app_env is a valid environment name."""
        valid_envs = {"development", "staging", "production", "testing"}
        normalized = v.lower()
        if normalized not in valid_envs:
            raise ValueError(f"Invalid app_env '{v}'. Must be one of: {', '.join(valid_envs)}")
        return normalized

    @field_validator("cors_origins", mode="before")
    @classmethod
    def validate_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Parse CORS origins from comma-separated string if provided as string."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("enabled_strategies", mode="before")
    @classmethod
    def validate_enabled_strategies(cls, v: str | list[str]) -> list[str]:
        """Parse strategy names from comma-separated string, normalizing case."""
        if isinstance(v, str):
            v = v.split(",")
        return [name.strip().lower() for name in v if name and name.strip()]

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get the global Settings instance.

    Configuration is loaded once on first call and the cached instance is
    returned afterwards without re-reading environment variables or .env files.

    Returns:
        Settings: The global configuration instance.
    """
    return Settings()
