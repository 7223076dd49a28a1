"""
MPT Guide Application Settings

Configuration management using Pydantic Settings.
All sensitive values are loaded from environment variables.

SECURITY: Never log or expose settings containing secrets.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


ProviderType = Literal["openai_compatible", "gemini"]


class PrimaryProviderSettings(BaseSettings):
    """Primary model backend (served first while the session is in normal mode)."""

    model_config = SettingsConfigDict(env_prefix="MPT_PRIMARY_")

    provider_type: ProviderType = Field(default="openai_compatible", description="Backend client type")
    name: str = Field(default="cerebras", description="Provider name used in logs and metrics")
    api_key: SecretStr = Field(default=SecretStr(""), description="Provider API key")
    base_url: str = Field(default="https://api.cerebras.ai/v1", description="OpenAI-compatible base URL")
    model: str = Field(default="qwen-3-32b", description="Model identifier")
    max_tokens: int = Field(default=4096, ge=64, le=32768)
    temperature: float = Field(default=0.4, ge=0.0, le=2.0)
    top_p: float = Field(default=0.8, ge=0.0, le=1.0)

    def is_configured(self) -> bool:
        """Check whether an API key was supplied."""
        return bool(self.api_key.get_secret_value())


class SecondaryProviderSettings(PrimaryProviderSettings):
    """Secondary model backend used after the primary reports a rate limit."""

    model_config = SettingsConfigDict(env_prefix="MPT_SECONDARY_")

    name: str = Field(default="algion", description="Provider name used in logs and metrics")
    base_url: str = Field(default="https://api.algion.dev/v1", description="OpenAI-compatible base URL")
    model: str = Field(default="gpt-4o", description="Model identifier")


class GatewaySettings(BaseSettings):
    """Failover behaviour of the provider gateway."""

    model_config = SettingsConfigDict(env_prefix="MPT_GATEWAY_")

    fallback_retry_interval_seconds: float = Field(
        default=300.0,
        ge=0.0,
        description="How long a session stays on the secondary before the primary is retried",
    )
    rate_limit_markers: list[str] = Field(
        default=["429", "rate limit", "tokens per day limit"],
        description="Lowercase error-text markers that classify a failure as a rate limit",
    )


class SessionSettings(BaseSettings):
    """In-memory session store limits."""

    model_config = SettingsConfigDict(env_prefix="MPT_SESSION_")

    ttl_seconds: int = Field(default=86400, ge=60, description="Idle session lifetime")
    max_sessions: int = Field(default=10000, ge=1, description="LRU capacity of the store")
    history_limit: int = Field(
        default=0,
        ge=0,
        description="Number of most recent messages sent to the model (0 sends all)",
    )


class Settings(BaseSettings):
    """
    Main application settings.

    All configuration is loaded from environment variables with MPT_ prefix.
    Sensitive values use SecretStr to prevent accidental logging.

    Usage:
        settings = get_settings()
        interval = settings.gateway.fallback_retry_interval_seconds
    """

    model_config = SettingsConfigDict(
        env_prefix="MPT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    env: Literal["development", "test", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode - NEVER enable in production")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level"
    )
    api_prefix: str = Field(default="/api", description="Prefix for all API routes")
    cors_origins: list[str] = Field(
        default=["http://localhost:5173"],
        description="Allowed CORS origins"
    )
    metrics_enabled: bool = Field(default=True, description="Expose /metrics for Prometheus")

    # Nested settings
    primary: PrimaryProviderSettings = Field(default_factory=PrimaryProviderSettings)
    secondary: SecondaryProviderSettings = Field(default_factory=SecondaryProviderSettings)
    gateway: GatewaySettings = Field(default_factory=GatewaySettings)
    session: SessionSettings = Field(default_factory=SessionSettings)

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.env == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.
    For testing, call ``get_settings.cache_clear()`` after changing env.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
