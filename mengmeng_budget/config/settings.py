"""
Configuration Management for MengMeng Budget

Uses pydantic-settings for type-safe configuration from environment variables.

All configuration is centralized here, so the backend address and the
request policy can be changed without touching the client code.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiSettings(BaseSettings):
    """Backend API configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MENGMENG_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    base_url: str = Field(
        default="http://localhost:8080/api",
        description="Base URL of the bookkeeping backend, including /api"
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Per-request timeout in seconds"
    )

    # Retry policy for idempotent requests only
    max_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Total attempts for idempotent requests"
    )
    retry_backoff_seconds: float = Field(
        default=1.0,
        ge=0,
        le=30,
        description="Exponential backoff multiplier between attempts"
    )

    # Transaction list paging
    page_size: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Transactions requested per page"
    )

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Endpoint paths are joined with a leading slash."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got {v!r}")
        return v.rstrip("/")


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum log level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_json: bool = Field(
        default=True,
        description="Render logs as JSON (False = human-readable console)"
    )

    # Add-transaction form sanity limit
    max_transaction_amount: float = Field(
        default=1000000.0,
        gt=0,
        description="Amounts above this are flagged for review"
    )

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def api(self) -> ApiSettings:
        return ApiSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    `<name>_error` entries for the ones that failed.
    """
    results = {}

    settings = get_settings()

    for name in ("api", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
