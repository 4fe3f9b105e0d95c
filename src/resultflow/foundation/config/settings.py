"""Settings for resultflow, read from RESULTFLOW_* environment variables.

Each group (debug views, retry defaults, structured logging) is its own
pydantic-settings model. With no environment set, every value equals the
fallback the component itself would use.

Example:
    >>> from resultflow.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.debug.max_string_length
    200
    >>> settings.retry.max_attempts
    1

    # Overridable through the environment, e.g.:
    # RESULTFLOW_DEBUG_REDACTION="[hidden]"
    # RESULTFLOW_DEBUG_SENSITIVE_KEYS='["*token*", "password"]'
    # RESULTFLOW_RETRY_MAX_ATTEMPTS=3
    # RESULTFLOW_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, NonNegativeInt, PositiveInt, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_REDACTION = "***REDACTED***"
DEFAULT_SENSITIVE_KEYS: tuple[str, ...] = (
    "password", "pass", "secret", "token", "api_key", "apikey", "ssn", "card", "authorization",
)


class DebugSettings(BaseSettings):
    """Sanitizer and diagnostic-view configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RESULTFLOW_DEBUG_",
        extra="ignore",
    )

    enabled: bool = Field(default=True, description="Enable sanitization in debug output")
    redaction: str = Field(default=DEFAULT_REDACTION, description="Replacement for sensitive values")
    sensitive_keys: tuple[str, ...] = Field(
        default=DEFAULT_SENSITIVE_KEYS,
        description="Substrings or globs (* and ?) matched case-insensitively against keys",
    )
    max_string_length: PositiveInt = Field(default=200, description="Truncate strings beyond this length")
    truncate_strings: bool = True
    log_level_map: dict[str, str] = Field(
        default_factory=dict,
        description="Exception class names or error codes mapped to log levels",
    )
    default_log_level: str | None = Field(default="error", description="Level when no mapping matches")

    @field_validator("default_log_level", mode="before")
    @classmethod
    def _none_level(cls, v: object) -> object:
        if isinstance(v, str) and v.strip().lower() in ("", "none", "null"):
            return None
        return v


class RetrySettings(BaseSettings):
    """Default retry configuration used by Retrier.from_settings()."""

    model_config = SettingsConfigDict(
        env_prefix="RESULTFLOW_RETRY_",
        extra="ignore",
    )

    max_attempts: Annotated[int, Field(ge=1, le=100)] = 1
    delay_ms: NonNegativeInt = Field(default=0, description="Base delay in milliseconds")
    exponential: bool = False
    jitter_ms: NonNegativeInt = Field(default=0, description="Upper bound of random jitter in milliseconds")
    attach_attempt_meta: bool = False


class LoggingSettings(BaseSettings):
    """Structured logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RESULTFLOW_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json", "none"] = "console"

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, v: object) -> object:
        return v.upper() if isinstance(v, str) else v


class ResultFlowSettings(BaseSettings):
    """Root settings for resultflow.

    Loads configuration from environment variables with RESULTFLOW_ prefix.
    A .env file in the working directory is read as well.

    Typical overrides:
        RESULTFLOW_DEBUG_ENABLED=false
        RESULTFLOW_DEBUG_MAX_STRING_LENGTH=80
        RESULTFLOW_RETRY_DELAY_MS=250
        RESULTFLOW_LOG_FORMAT=json
    """

    model_config = SettingsConfigDict(
        env_prefix="RESULTFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    debug: DebugSettings = Field(default_factory=DebugSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> ResultFlowSettings:
    """Process-wide settings, parsed once.

    Example:
        >>> get_settings().debug.redaction
        '***REDACTED***'
    """
    return ResultFlowSettings()


def clear_settings_cache() -> None:
    """Drop the cached settings so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()
