"""Configuration management for the Settlement Review service.

Configuration is loaded from environment variables.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppEnvironment(str, Enum):
    LOCAL = "local"
    TEST = "test"
    PROD = "prod"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class AppConfig(BaseSettings):
    name: str = Field(default="settlement-review")
    env: AppEnvironment = Field(default=AppEnvironment.LOCAL)
    version: str = Field(default="0.1.0")
    debug: bool = Field(default=False)
    log_level: LogLevel = Field(default=LogLevel.INFO)

    model_config = SettingsConfigDict(env_prefix="APP_")

    @field_validator("env", mode="before")
    @classmethod
    def validate_env(cls, v: str | AppEnvironment) -> AppEnvironment:
        if isinstance(v, AppEnvironment):
            return v
        return AppEnvironment(v)

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        if isinstance(v, LogLevel):
            return v
        return LogLevel(v.upper())


class ServerConfig(BaseSettings):
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080)
    # Review workspaces live in process memory, so one worker per deployment
    workers: int = Field(default=1)

    model_config = SettingsConfigDict(env_prefix="SERVER_")


class PaymentsBackendConfig(BaseSettings):
    base_url: str = Field(default="http://localhost:5000/api")
    timeout: float = Field(default=10.0)
    transactions_path: str = Field(default="/employee/transactions")
    submit_path: str = Field(default="/employee/transactions/submit-swift")
    verify_token_path: str = Field(default="/auth/verify")

    model_config = SettingsConfigDict(env_prefix="PAYMENTS_API_")

    @field_validator("base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class ReviewConfig(BaseSettings):
    required_role: str = Field(default="employee")
    timezone: str = Field(default="UTC")  # Calendar day used by the date filter
    dashboard_preview_size: int = Field(default=5, ge=0)
    max_batch_size: int = Field(default=500, ge=1)

    model_config = SettingsConfigDict(env_prefix="REVIEW_")

    @field_validator("timezone", mode="after")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


class ObservabilityConfig(BaseSettings):
    service_name: str = Field(default="settlement-review")
    otlp_endpoint: str | None = Field(default=None)
    otlp_insecure: bool = Field(default=True)  # Use HTTPS in production, HTTP only for local dev
    log_record_format: str = Field(default="json")

    model_config = SettingsConfigDict(env_prefix="OTEL_")


class SecurityConfig(BaseSettings):
    cors_allowed_origins: str = Field(default="http://localhost:3000,http://localhost:5173")
    cors_allow_credentials: bool = Field(default=True)
    cors_allow_methods: list[str] = Field(default=["GET", "POST", "PUT", "DELETE"])
    cors_allow_headers: list[str] = Field(default=["Authorization", "Content-Type"])

    # Local Development: accept any caller as the local employee user
    # SECURITY: ONLY allowed in local environment. Will raise error in test/prod.
    skip_token_verification: bool = Field(default=False)

    model_config = SettingsConfigDict(env_prefix="SECURITY_")

    @field_validator("cors_allowed_origins", mode="after")
    @classmethod
    def validate_cors_allowed_origins(cls, v: str | list[str]) -> list[str]:
        """Parse comma-separated string into list of origins."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("skip_token_verification", mode="before")
    @classmethod
    def parse_skip_token_verification(cls, v: bool | str) -> bool:
        """Parse boolean from environment variable (string "true"/"false")."""
        if isinstance(v, str):
            return v.lower() in ("true", "1", "yes", "on")
        return v


class Settings(BaseSettings):
    app: AppConfig = Field(default_factory=AppConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    payments_api: PaymentsBackendConfig = Field(default_factory=PaymentsBackendConfig)
    review: ReviewConfig = Field(default_factory=ReviewConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)

    @model_validator(mode="after")
    def validate_security_settings(self) -> Settings:
        """Validate security settings after all configs are loaded."""
        if self.security.skip_token_verification and self.app.env != AppEnvironment.LOCAL:
            raise ValueError(
                "SECURITY_SKIP_TOKEN_VERIFICATION can only be set in local environment. "
                f"Current environment: {self.app.env.value}"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def reload_settings() -> Settings:
    """Reload settings (useful for testing)."""
    get_settings.cache_clear()
    return get_settings()
