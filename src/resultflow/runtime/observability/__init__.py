"""Observability: metadata sanitization, diagnostic views and structured logging."""

from .debug import log_outcome, resolve_log_level, to_debug_dict, type_tag
from .logging import (
    BoundLogger,
    ConsoleRenderer,
    JsonRenderer,
    LogEntry,
    NoOpRenderer,
    configure_from_settings,
    configure_logging,
    get_logger,
    log_context,
)
from .sanitizer import Sanitizer, SanitizerConfig, compile_patterns, glob_matcher, sanitize

__all__ = [
    # Sanitizer
    "Sanitizer",
    "SanitizerConfig",
    "compile_patterns",
    "glob_matcher",
    "sanitize",
    # Diagnostics
    "to_debug_dict",
    "resolve_log_level",
    "log_outcome",
    "type_tag",
    # Logging
    "BoundLogger",
    "ConsoleRenderer",
    "JsonRenderer",
    "LogEntry",
    "NoOpRenderer",
    "configure_logging",
    "configure_from_settings",
    "get_logger",
    "log_context",
]
