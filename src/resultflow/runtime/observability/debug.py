"""Redaction-safe diagnostic view of an Outcome.

to_debug_dict() describes an Outcome without exposing payloads: type tags
instead of values, a sanitized error message and sanitized metadata. Failed
Outcomes also carry a log level resolved from RESULTFLOW_DEBUG_LOG_LEVEL_MAP.

Example:
    >>> from resultflow import failure
    >>> to_debug_dict(failure(ValueError("bad input"), {"password": "hunter2"}))
    {'ok': False, 'value_type': None, 'error_type': 'ValueError', 'error_message': 'bad input',
     'log_level': 'error', 'meta': {'password': '***REDACTED***'}}
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Callable

from resultflow.foundation.config import DebugSettings, get_settings
from resultflow.runtime.observability.sanitizer import Sanitizer

if TYPE_CHECKING:
    from resultflow.monads.outcome import Outcome
    from resultflow.runtime.observability.logging import BoundLogger

SanitizeFn = Callable[[Any], Any]


def type_tag(value: object) -> str:
    """Short type name; "null" for None."""
    return "null" if value is None else type(value).__name__


def to_debug_dict(outcome: Outcome[Any, Any], sanitizer: SanitizeFn | None = None) -> dict[str, Any]:
    """Diagnostic dict with keys ok, value_type, error_type, error_message, log_level, meta.

    Args:
        outcome: Outcome to describe
        sanitizer: Callable applied to the error message and metadata;
            defaults to a Sanitizer built from settings
    """
    clean = sanitizer or Sanitizer.from_settings()
    if outcome.is_success():
        return {
            "ok": True,
            "value_type": type_tag(outcome.value),
            "error_type": None,
            "error_message": None,
            "log_level": None,
            "meta": clean(outcome.meta),
        }

    error = outcome.error
    match error:
        case BaseException(): message = clean(str(error))
        case str(): message = clean(error)
        case _: message = None

    return {
        "ok": False,
        "value_type": None,
        "error_type": type_tag(error),
        "error_message": message,
        "log_level": resolve_log_level(error),
        "meta": clean(outcome.meta),
    }


# ═════════════════════════════════════════════════════════════════════════════
# Log Level Resolution
# ═════════════════════════════════════════════════════════════════════════════


def resolve_log_level(error: object, debug: DebugSettings | None = None) -> str | None:
    """Log level for a failure payload.

    Lookup order in log_level_map:
      1. exception class names along the MRO (bare or module-qualified)
      2. the exception's `code` attribute
      3. a mapping error's "code" entry
      4. a str or int error itself
    Falls back to default_log_level, which may be None.
    """
    debug = debug or get_settings().debug
    level = _find_level(error, debug.log_level_map)
    return level if level is not None else debug.default_log_level


def _find_level(error: object, level_map: Mapping[Any, str]) -> str | None:
    if not level_map:
        return None

    if isinstance(error, BaseException):
        for cls in type(error).__mro__:
            for name in (cls.__name__, cls.__qualname__, f"{cls.__module__}.{cls.__qualname__}"):
                if name in level_map:
                    return level_map[name]
        if (level := _match_code(level_map, getattr(error, "code", None))) is not None:
            return level

    if isinstance(error, Mapping) and "code" in error:
        if (level := _match_code(level_map, error["code"])) is not None:
            return level

    return _match_code(level_map, error)


def _match_code(level_map: Mapping[Any, str], code: object) -> str | None:
    """Match an int or str code, trying its int/str twin as well."""
    if isinstance(code, bool) or not isinstance(code, (int, str)):
        return None
    variants: list[object] = [code]
    if isinstance(code, int):
        variants.append(str(code))
    elif code.isdigit():
        variants.append(int(code))
    for key in variants:
        if key in level_map:
            return level_map[key]
    return None


# ═════════════════════════════════════════════════════════════════════════════
# Structured Emission
# ═════════════════════════════════════════════════════════════════════════════


def log_outcome(
    outcome: Outcome[Any, Any],
    log: BoundLogger | None = None,
    *,
    event: str | None = None,
    sanitizer: SanitizeFn | None = None,
) -> dict[str, Any]:
    """Emit the diagnostic view through the structured logger and return it.

    Successes log at debug. Failures log at their resolved level; a failure
    whose level resolves to None is not logged.
    """
    from resultflow.runtime.observability.logging import get_logger

    view = to_debug_dict(outcome, sanitizer)
    level = "debug" if view["ok"] else view["log_level"]
    if level is not None:
        fields = {k: v for k, v in view.items() if k != "log_level"}
        (log or get_logger("resultflow.outcome")).log(level, event or ("outcome.success" if view["ok"] else "outcome.failure"), **fields)
    return view
