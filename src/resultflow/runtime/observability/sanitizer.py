"""Redaction and truncation of metadata for diagnostic output.

Sensitive-key patterns come in two flavors, both case-insensitive:

- plain words match anywhere in the key ("token" matches "refresh_token")
- globs containing * or ? match the whole key via fnmatch ("*_key", "api_*", "?id")

Only string keys are considered; integer keys and other non-string keys are
never redacted. Strings longer than max_string_length are cut and suffixed
with an ellipsis.

Example:
    >>> sanitizer = Sanitizer(SanitizerConfig(sensitive_keys=("*token*",)))
    >>> sanitizer({"AccessToken": "abc", "user": "ada"})
    {'AccessToken': '***REDACTED***', 'user': 'ada'}
"""

from __future__ import annotations

import fnmatch
from collections.abc import Mapping
from functools import lru_cache
from typing import Annotated, Any, Callable

from pydantic import BaseModel, ConfigDict, Field

from resultflow.foundation.config import DEFAULT_REDACTION, DEFAULT_SENSITIVE_KEYS, get_settings

ELLIPSIS = "…"

KeyMatcher = Callable[[str], bool]


class SanitizerConfig(BaseModel):
    """Sanitizer options. Defaults apply when no configuration source is present."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        json_schema_extra={
            "title": "Sanitizer Configuration",
            "examples": [{"redaction": "[hidden]", "sensitive_keys": ["password", "*token*"], "max_string_length": 80}],
        },
    )

    enabled: bool = True
    redaction: str = DEFAULT_REDACTION
    sensitive_keys: tuple[str, ...] = DEFAULT_SENSITIVE_KEYS
    max_string_length: Annotated[int, Field(ge=0)] = 200
    truncate_strings: bool = True

    @classmethod
    def from_settings(cls) -> SanitizerConfig:
        """Build from RESULTFLOW_DEBUG_* settings."""
        debug = get_settings().debug
        return cls(
            enabled=debug.enabled,
            redaction=debug.redaction,
            sensitive_keys=tuple(debug.sensitive_keys),
            max_string_length=debug.max_string_length,
            truncate_strings=debug.truncate_strings,
        )


# ═════════════════════════════════════════════════════════════════════════════
# Pattern Compilation
# ═════════════════════════════════════════════════════════════════════════════


def is_glob(pattern: str) -> bool:
    return "*" in pattern or "?" in pattern


def glob_matcher(pattern: str) -> KeyMatcher:
    """Whole-key, case-insensitive glob match where * is any run and ? one character.

    Brackets are literal: "card[*]" matches "card[0]" but not "card0".

    Example:
        >>> glob_matcher("api_*")("API_USER")
        True
    """
    lowered = pattern.lower().replace("[", "[[]")
    return lambda key: fnmatch.fnmatchcase(key.lower(), lowered)


def _compile_one(pattern: str) -> KeyMatcher:
    if is_glob(pattern):
        return glob_matcher(pattern)
    needle = pattern.lower()
    return lambda key: needle in key.lower()


@lru_cache(maxsize=64)
def compile_patterns(patterns: tuple[str, ...]) -> tuple[KeyMatcher, ...]:
    """Compile a pattern set once; empty patterns are ignored."""
    return tuple(_compile_one(p) for p in patterns if p)


# ═════════════════════════════════════════════════════════════════════════════
# Sanitizer
# ═════════════════════════════════════════════════════════════════════════════


class Sanitizer:
    """Callable that returns a redaction-safe copy of nested values.

    Mappings become dicts, lists and tuples keep their type, strings may be
    truncated, everything else passes through unchanged.
    """

    __slots__ = ("config", "_matchers")

    def __init__(self, config: SanitizerConfig | None = None) -> None:
        self.config = config or SanitizerConfig()
        self._matchers = compile_patterns(self.config.sensitive_keys)

    @classmethod
    def from_settings(cls) -> Sanitizer:
        return cls(SanitizerConfig.from_settings())

    def is_sensitive(self, key: object) -> bool:
        """Whether a mapping key's value must be redacted."""
        return isinstance(key, str) and any(match(key) for match in self._matchers)

    def __call__(self, value: Any) -> Any:
        return self.sanitize(value) if self.config.enabled else value

    def sanitize(self, value: Any) -> Any:
        """Recursively redact and truncate value regardless of the enabled flag."""
        match value:
            case Mapping():
                return {
                    k: self.config.redaction if self.is_sensitive(k) else self.sanitize(v)
                    for k, v in value.items()
                }
            case list():
                return [self.sanitize(v) for v in value]
            case tuple():
                return tuple(self.sanitize(v) for v in value)
            case str():
                return self.truncate(value)
            case _:
                return value

    def truncate(self, text: str) -> str:
        limit = self.config.max_string_length
        if self.config.truncate_strings and len(text) > limit:
            return text[:limit] + ELLIPSIS
        return text


def sanitize(value: Any, config: SanitizerConfig | None = None) -> Any:
    """One-shot sanitization; uses settings-derived config when none is given."""
    return Sanitizer(config or SanitizerConfig.from_settings())(value)
