"""Configuration management using pydantic-settings.

Provides environment-based configuration with type safety and validation.
"""

from .settings import (
    DEFAULT_REDACTION,
    DEFAULT_SENSITIVE_KEYS,
    DebugSettings,
    LoggingSettings,
    ResultFlowSettings,
    RetrySettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "DEFAULT_REDACTION",
    "DEFAULT_SENSITIVE_KEYS",
    "DebugSettings",
    "LoggingSettings",
    "ResultFlowSettings",
    "RetrySettings",
    "clear_settings_cache",
    "get_settings",
]
