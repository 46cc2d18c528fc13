"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


DEFAULT_TOKEN_SECRET = "change-me-in-production-use-long-random-string"


def _build_app_settings() -> "AppSettings":
    """Build app settings from environment.

    Pydantic Settings (v2) populates values from environment variables, so
    the nested settings are created via default_factory rather than passed in.
    """

    return AppSettings()


def _build_admission_settings() -> "AdmissionSettings":
    return AdmissionSettings()


def _build_auth_settings() -> "AuthSettings":
    return AuthSettings()


def _build_log_settings() -> "LogSettings":
    return LogSettings()


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    max_page_size: int = Field(
        100,
        description="Maximum number of products or reviews returned per page",
        ge=1,
    )
    default_page_size: int = Field(
        10,
        description="Page size used when the client does not send one",
        ge=1,
    )
    default_review_page_size: int = Field(
        50,
        description="Review page size used when the client does not send one",
        ge=1,
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class AdmissionSettings(BaseSettings):
    """Request admission (sliding-window rate limit + auth lockout)."""

    enabled: bool = Field(
        True,
        description="Enable per-client admission control",
    )
    max_requests: int = Field(
        100,
        description="Maximum number of admitted requests per sliding window (per client)",
        ge=1,
    )
    window_seconds: int = Field(
        60,
        description="Sliding window width in seconds",
        ge=1,
    )
    lockout_threshold: int = Field(
        5,
        description="Consecutive authentication failures that trigger a lockout",
        ge=1,
    )
    lockout_duration_seconds: int = Field(
        900,
        description="How long a client stays blocked once the lockout triggers",
        ge=1,
    )
    max_tracked_clients: int = Field(
        10_000,
        description="Upper bound on per-client records kept in memory",
        ge=1,
    )
    sweep_interval_seconds: int = Field(
        60,
        description="Minimum spacing between lazy sweeps of idle client records",
        ge=1,
    )
    exempt_paths: list[str] = Field(
        default_factory=lambda: ["/health"],
        description="Request paths that bypass admission control",
    )
    include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when rejecting",
    )

    model_config = SettingsConfigDict(
        env_prefix="ADMISSION_",
        case_sensitive=False,
    )


class AuthSettings(BaseSettings):
    """Credential verification configuration."""

    token_secret: str = Field(
        DEFAULT_TOKEN_SECRET,
        description="Process-wide secret used to sign access tokens",
    )
    token_ttl_seconds: int = Field(
        3600,
        description="Lifetime of issued access tokens in seconds",
        ge=1,
    )
    api_key_prefix: str = Field(
        "rk_",
        description="Marker prefix distinguishing API keys from signed tokens",
        min_length=1,
    )
    bcrypt_rounds: int = Field(
        12,
        description="bcrypt cost factor used for password hashing",
        ge=4,
        le=31,
    )

    model_config = SettingsConfigDict(
        env_prefix="AUTH_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    output: str = Field("stdout", description="Log destination: stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(10_485_760, ge=1, description="Rotate log file after this many bytes")
    backup_count: int = Field(5, description="Number of rotated log files to keep")
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to propagate the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if required settings are missing
    or unsafe for the environment.
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=_build_app_settings)
    admission: AdmissionSettings = Field(default_factory=_build_admission_settings)
    auth: AuthSettings = Field(default_factory=_build_auth_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def _refuse_default_secret_in_production(self) -> "Settings":
        if self.app_env == "production" and self.auth.token_secret == DEFAULT_TOKEN_SECRET:
            raise ValueError(
                "AUTH_TOKEN_SECRET must be changed from its default value in production"
            )
        return self


# Global settings instance - composed from domain-specific settings
settings = Settings()
