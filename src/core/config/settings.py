# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

This module provides centralized configuration management for StudyPilot.
Settings are loaded from environment variables with sensible defaults.

The Settings class is the main entry point and aggregates all subsettings.
A singleton instance is provided via get_settings() for dependency injection.

Example:
    >>> from src.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> print(settings.analytics.timezone)
    'UTC'
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_AUTH_SECRET = "change-this-in-production"


class DatabaseSettings(BaseSettings):
    """Relational store configuration.

    Holds every table the platform reads and writes: files, quizzes,
    attempts, study materials, study sessions, streaks and the
    question-type performance aggregates.

    Attributes:
        user: PostgreSQL username.
        password: PostgreSQL password.
        host: Database host address.
        port: Database port number.
        database: Database name.
        pool_size: Connection pool size.
        max_overflow: Maximum overflow connections.
        echo: Log every SQL statement.
    """

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        extra="ignore",
    )

    user: str = "studypilot"
    password: SecretStr = SecretStr("studypilot_password")
    host: str = "localhost"
    port: int = 5432
    database: str = "studypilot"
    pool_size: int = 10
    max_overflow: int = 20
    echo: bool = False

    @property
    def url(self) -> str:
        """Build the async database URL from components."""
        pwd = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{pwd}@{self.host}:{self.port}/{self.database}"

    @property
    def sync_url(self) -> str:
        """Build the sync database URL for migrations."""
        pwd = self.password.get_secret_value()
        return f"postgresql://{self.user}:{pwd}@{self.host}:{self.port}/{self.database}"


class AuthSettings(BaseSettings):
    """Hosted auth provider token verification.

    Access tokens are issued by the hosted auth provider. This service only
    verifies them with the shared project secret.

    Attributes:
        secret_key: Shared secret used to verify access tokens.
        algorithm: JWT signing algorithm.
        audience: Expected "aud" claim, or None to skip the check.
    """

    model_config = SettingsConfigDict(
        env_prefix="AUTH_",
        extra="ignore",
    )

    secret_key: SecretStr = SecretStr(DEFAULT_AUTH_SECRET)
    algorithm: str = "HS256"
    audience: str | None = "authenticated"


class StorageSettings(BaseSettings):
    """Object storage bucket configuration.

    Attributes:
        root_path: Directory that holds the buckets.
        bucket: Bucket name for uploaded documents.
        signed_url_expire_seconds: Lifetime of signed download URLs.
        max_upload_bytes: Upload size cap.
        allowed_mime_types: MIME types accepted for upload.
    """

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        extra="ignore",
    )

    root_path: str = "./storage"
    bucket: str = "documents"
    signed_url_expire_seconds: int = 60
    max_upload_bytes: int = 5 * 1024 * 1024
    allowed_mime_types: list[str] = [
        "application/pdf",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/msword",
        "text/plain",
    ]


class LLMSettings(BaseSettings):
    """Generative content provider configuration using LiteLLM.

    Attributes:
        default_model: Model identifier in LiteLLM format.
        google_api_key: Google AI API key.
        request_timeout: Request timeout in seconds.
        max_retries: Maximum retry attempts.
        temperature: Default sampling temperature.
        max_tokens: Default completion token cap.
    """

    model_config = SettingsConfigDict(
        extra="ignore",
    )

    default_model: str = Field(
        default="gemini/gemini-2.0-flash",
        validation_alias="LLM_DEFAULT_MODEL",
    )
    google_api_key: SecretStr | None = Field(
        default=None,
        validation_alias="GOOGLE_API_KEY",
    )
    request_timeout: float = 60.0
    max_retries: int = 3
    temperature: float = 0.7
    max_tokens: int = 4096


class AnalyticsSettings(BaseSettings):
    """Learning analytics configuration.

    Benchmarks are fixed illustrative anchors, not cohort statistics.

    Attributes:
        timezone: IANA timezone used to bucket events into calendar days.
        trend_threshold: Points of change needed to call a trend.
        recent_window: Number of recent scores compared in trends.
        smoothing_factor: Weight given to recent scores in predictions.
        benchmark_average_score: Reference average score.
        benchmark_study_minutes: Reference study time in minutes.
        benchmark_quizzes_completed: Reference number of quizzes.
        benchmark_improvement: Reference improvement for similar learners.
        trend_history_limit: Rows read when computing trends.
    """

    model_config = SettingsConfigDict(
        env_prefix="ANALYTICS_",
        extra="ignore",
    )

    timezone: str = "UTC"
    trend_threshold: float = 5.0
    recent_window: int = 3
    smoothing_factor: float = 0.7
    benchmark_average_score: float = 75.0
    benchmark_study_minutes: float = 180.0
    benchmark_quizzes_completed: int = 8
    benchmark_improvement: float = 12.0
    trend_history_limit: int = 20

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Reject timezone names unknown to the tz database."""
        from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

        try:
            ZoneInfo(value)
        except ZoneInfoNotFoundError as e:
            raise ValueError(f"Unknown timezone: {value}") from e
        return value


class CORSSettings(BaseSettings):
    """CORS configuration for API.

    Attributes:
        origins: Comma-separated list of allowed origins.
        allow_credentials: Whether to allow credentials.
        allow_methods: Allowed HTTP methods.
        allow_headers: Allowed HTTP headers.
    """

    model_config = SettingsConfigDict(
        env_prefix="CORS_",
        extra="ignore",
    )

    origins: str = "http://localhost:3000"
    allow_credentials: bool = True
    allow_methods: list[str] = ["*"]
    allow_headers: list[str] = ["*"]

    @property
    def origins_list(self) -> list[str]:
        """Parse origins string into a list."""
        return [origin.strip() for origin in self.origins.split(",") if origin.strip()]


class APISettings(BaseSettings):
    """API server configuration."""

    model_config = SettingsConfigDict(
        env_prefix="API_",
        extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1
    reload: bool = False


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Use get_settings() to obtain a cached singleton instance.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        database: Relational store settings.
        auth: Access token verification settings.
        storage: Object storage settings.
        llm: Generative content provider settings.
        analytics: Learning analytics settings.
        cors: CORS settings.
        api: API server settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    # Subsettings - loaded with their own env prefixes
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    analytics: AnalyticsSettings = Field(default_factory=AnalyticsSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)
    api: APISettings = Field(default_factory=APISettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Validate that production settings are properly configured.

        Raises:
            ValueError: If running in production with insecure defaults.
        """
        if self.environment == "production":
            if self.auth.secret_key.get_secret_value() == DEFAULT_AUTH_SECRET:
                raise ValueError(
                    "Auth secret key must be changed from default in production. "
                    "Set AUTH_SECRET_KEY environment variable."
                )
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call clear_settings_cache() if you need to reload settings.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Useful for testing or dynamic configuration updates.
    """
    get_settings.cache_clear()
