"""Tests for metadata redaction and truncation."""

from __future__ import annotations

import pytest

from resultflow import Sanitizer, SanitizerConfig
from resultflow.foundation.config import clear_settings_cache
from resultflow.runtime.observability import compile_patterns, glob_matcher, sanitize


@pytest.fixture(autouse=True)
def fresh_settings() -> object:
    """Reset cached settings around each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


def make(**kw: object) -> Sanitizer:
    return Sanitizer(SanitizerConfig(**kw))


# ═════════════════════════════════════════════════════════════════════════════
# Key Matching
# ═════════════════════════════════════════════════════════════════════════════


def test_glob_redacts_regardless_of_case() -> None:
    s = make(sensitive_keys=("*token*",))
    out = s({"AccessToken": "a", "TOKEN": "b", "refresh_token_v2": "c", "user": "ada"})
    assert out == {"AccessToken": "***REDACTED***", "TOKEN": "***REDACTED***",
                   "refresh_token_v2": "***REDACTED***", "user": "ada"}


def test_glob_is_anchored() -> None:
    s = make(sensitive_keys=("api_*", "?id"))
    assert s.is_sensitive("API_KEY")
    assert not s.is_sensitive("my_api_key")
    assert s.is_sensitive("uid")
    assert not s.is_sensitive("uuid")


def test_plain_pattern_is_substring() -> None:
    s = make(sensitive_keys=("secret",))
    assert s.is_sensitive("ClientSecretValue")
    assert not s.is_sensitive("public")


def test_non_string_keys_never_redacted() -> None:
    s = make(sensitive_keys=("123", "*"))
    assert s({123: "visible", 4.5: "also"}) == {123: "visible", 4.5: "also"}


def test_empty_patterns_ignored() -> None:
    assert compile_patterns(("", "x")) is compile_patterns(("", "x"))
    assert len(compile_patterns(("", "x"))) == 1
    assert not make(sensitive_keys=("",)).is_sensitive("anything")


def test_brackets_are_literal_in_globs() -> None:
    assert glob_matcher("card[*]")("CARD[0]")
    assert not glob_matcher("card[*]")("card0")


def test_default_sensitive_keys() -> None:
    out = make()({"password": "p", "Authorization": "Bearer x", "name": "n"})
    assert out == {"password": "***REDACTED***", "Authorization": "***REDACTED***", "name": "n"}


# ═════════════════════════════════════════════════════════════════════════════
# Recursion & Truncation
# ═════════════════════════════════════════════════════════════════════════════


def test_nested_structures_recursed() -> None:
    s = make(redaction="[x]")
    data = {"user": {"name": "ada", "password": "p"}, "items": [{"token": "t"}, "plain"], "pair": ("a", {"ssn": 1})}
    assert s(data) == {"user": {"name": "ada", "password": "[x]"}, "items": [{"token": "[x]"}, "plain"],
                       "pair": ("a", {"ssn": "[x]"})}


def test_long_string_truncated_with_ellipsis() -> None:
    out = make(max_string_length=200)({"blob": "x" * 250})
    assert out["blob"] == "x" * 200 + "…"
    assert len(out["blob"]) == 201


def test_truncation_can_be_disabled() -> None:
    assert make(truncate_strings=False, max_string_length=3)("abcdef") == "abcdef"
    assert make(max_string_length=3)("abc") == "abc"


def test_scalars_pass_through() -> None:
    s = make()
    assert s(42) == 42
    assert s(None) is None


def test_disabled_returns_input_unchanged() -> None:
    data = {"password": "p" * 500}
    assert make(enabled=False)(data) is data


def test_input_not_mutated() -> None:
    data = {"password": "p"}
    make()(data)
    assert data == {"password": "p"}


# ═════════════════════════════════════════════════════════════════════════════
# Settings
# ═════════════════════════════════════════════════════════════════════════════


def test_config_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RESULTFLOW_DEBUG_REDACTION", "[hidden]")
    monkeypatch.setenv("RESULTFLOW_DEBUG_SENSITIVE_KEYS", '["*_id"]')
    monkeypatch.setenv("RESULTFLOW_DEBUG_MAX_STRING_LENGTH", "5")
    clear_settings_cache()

    config = SanitizerConfig.from_settings()
    assert config.sensitive_keys == ("*_id",)
    assert sanitize({"user_id": 1, "password": "p", "note": "long note"}) == {
        "user_id": "[hidden]", "password": "p", "note": "long …",
    }


def test_disabled_via_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RESULTFLOW_DEBUG_ENABLED", "false")
    clear_settings_cache()
    assert Sanitizer.from_settings()({"password": "p"}) == {"password": "p"}
