"""Tests for the Outcome container.

Validates:
- Functor and monad laws over both branches
- Branch gating of then/otherwise
- Metadata preservation through every transform
- Unwrapping and exception escalation
- Collection combinators
"""

from __future__ import annotations

from typing import Callable

import pytest

from resultflow import (
    Outcome,
    UnwrapError,
    combine,
    combine_all,
    defer,
    failure,
    failure_with_value,
    of,
    success,
)


# ═════════════════════════════════════════════════════════════════════════════
# Property Tests - Functor Laws
# ═════════════════════════════════════════════════════════════════════════════


def test_map_value_on_success_applies_and_keeps_meta() -> None:
    """success(S, m).map_value(f) == success(f(S), m)"""
    f: Callable[[int], int] = lambda x: x * 3
    for value in (0, 1, -7, 42):
        assert success(value, {"m": 1}).map_value(f) == success(f(value), {"m": 1})


def test_map_value_on_failure_is_noop() -> None:
    """failure(F, m).map_value(f) == failure(F, m)"""
    calls: list[object] = []
    out = failure("boom", {"m": 1}).map_value(lambda x: calls.append(x))
    assert out == failure("boom", {"m": 1})
    assert calls == []


def test_functor_identity_and_composition() -> None:
    """fmap id = id and fmap (f . g) = fmap f . fmap g"""
    f: Callable[[int], int] = lambda x: x + 1
    g: Callable[[int], int] = lambda x: x * 2
    out: Outcome[int, str] = success(5, {"k": "v"})

    assert out.map_value(lambda x: x) == out
    assert out.map_value(lambda x: f(g(x))) == out.map_value(g).map_value(f)


def test_map_error_mirrors_map_value() -> None:
    """map_error transforms failures only."""
    assert failure("e", {"a": 1}).map_error(str.upper) == failure("E", {"a": 1})
    assert success(1).map_error(str.upper) == success(1)


def test_transforms_receive_meta_when_they_ask_for_it() -> None:
    """Two-argument callbacks receive the metadata as second argument."""
    out = success(2, {"factor": 5}).map_value(lambda v, meta: v * meta["factor"])
    assert out.value == 10


# ═════════════════════════════════════════════════════════════════════════════
# Property Tests - Monad Laws
# ═════════════════════════════════════════════════════════════════════════════


def test_monad_left_identity() -> None:
    """return a >>= f = f a"""
    f: Callable[[int], Outcome[int, str]] = lambda x: success(x * 2)
    assert success(21).then(f) == f(21)


def test_monad_right_identity() -> None:
    """m >>= return = m"""
    m: Outcome[int, str] = success(42, {"trace": "t1"})
    assert m.then(lambda x, meta: success(x, meta)) == m


def test_monad_associativity() -> None:
    """(m >>= f) >>= g = m >>= (\\x -> f x >>= g)"""
    m: Outcome[int, str] = success(5)
    f: Callable[[int], Outcome[int, str]] = lambda x: success(x + 1)
    g: Callable[[int], Outcome[int, str]] = lambda x: success(x * 2)

    assert m.then(f).then(g) == m.then(lambda x: f(x).then(g))


def test_flat_map_is_then() -> None:
    """flat_map is an alias of then."""
    assert Outcome.flat_map is Outcome.then


# ═════════════════════════════════════════════════════════════════════════════
# Branch Gating
# ═════════════════════════════════════════════════════════════════════════════


def test_failure_unaffected_by_then_chain() -> None:
    """Any number of then() calls leave a failure untouched."""
    calls: list[int] = []
    original = failure("nope", {"id": 7})
    out = original
    for i in range(5):
        out = out.then(lambda x, i=i: calls.append(i))
    assert out == original
    assert calls == []


def test_success_unaffected_by_otherwise_chain() -> None:
    """Any number of otherwise() calls leave a success untouched."""
    calls: list[int] = []
    original = success("ok", {"id": 7})
    out = original
    for i in range(5):
        out = out.otherwise(lambda e, i=i: calls.append(i))
    assert out == original
    assert calls == []


def test_otherwise_recovery_short_circuits_later_handlers() -> None:
    """Once otherwise() recovers, later otherwise() handlers never run."""
    seen: list[str] = []
    out = (
        failure("first", {"req": "r1"})
        .otherwise(lambda e: seen.append(f"h1:{e}") or success("recovered"))
        .otherwise(lambda e: seen.append("h2"))
    )
    assert out.is_success()
    assert out.value == "recovered"
    assert seen == ["h1:first"]


def test_otherwise_raw_return_becomes_success_with_meta() -> None:
    """A raw return from a failure handler becomes success carrying metadata."""
    out = failure("missing", {"req": "r1"}).otherwise(lambda e, meta: f"default for {meta['req']}")
    assert out == success("default for r1", {"req": "r1"})


def test_recover_keeps_meta() -> None:
    out = failure(404, {"path": "/x"}).recover(lambda code: {"status": code})
    assert out == success({"status": 404}, {"path": "/x"})


# ═════════════════════════════════════════════════════════════════════════════
# Metadata
# ═════════════════════════════════════════════════════════════════════════════


def test_meta_accessor_returns_copy() -> None:
    """Mutating the returned metadata does not affect the Outcome."""
    out = success(1, {"a": 1})
    snapshot = out.meta
    snapshot["a"] = 99
    assert out.meta == {"a": 1}


def test_constructor_copies_meta() -> None:
    source = {"a": 1}
    out = failure("e", source)
    source["a"] = 2
    assert out.meta == {"a": 1}


def test_merge_and_replace_meta() -> None:
    out = success(1, {"a": 1, "b": 1}).merge_meta({"b": 2, "c": 3})
    assert out.meta == {"a": 1, "b": 2, "c": 3}
    assert out.replace_meta(lambda m: {"only": len(m)}).meta == {"only": 3}


def test_taps_are_branch_aware_and_return_self() -> None:
    seen: list[tuple[str, object]] = []
    ok = success(1, {"m": 1})
    err = failure("e")

    assert ok.on_success(lambda v: seen.append(("ok", v))).on_failure(lambda e: seen.append(("err", e))) is ok
    assert err.on_success(lambda v: seen.append(("ok", v))).on_failure(lambda e: seen.append(("err", e))) is err
    ok.tap(lambda v, e, meta: seen.append(("tap", (v, e, meta))))
    ok.tap_meta(lambda meta: seen.append(("meta", meta)))

    assert seen == [("ok", 1), ("err", "e"), ("tap", (1, None, {"m": 1})), ("meta", {"m": 1})]


def test_inspect_aliases() -> None:
    assert Outcome.inspect is Outcome.on_success
    assert Outcome.inspect_err is Outcome.on_failure


# ═════════════════════════════════════════════════════════════════════════════
# Ensure & Exception Handling
# ═════════════════════════════════════════════════════════════════════════════


def test_ensure_fails_on_false_predicate() -> None:
    assert success(5).ensure(lambda v: v > 0, "not positive") == success(5)
    assert success(-1, {"k": 1}).ensure(lambda v: v > 0, "not positive") == failure("not positive", {"k": 1})


def test_ensure_builds_error_from_callable() -> None:
    out = success(-3).ensure(lambda v: v > 0, lambda v: f"{v} is not positive")
    assert out.error == "-3 is not positive"


def test_catch_exception_dispatches_by_class() -> None:
    handlers = {
        KeyError: lambda e: "key",
        LookupError: lambda e: "lookup",
    }
    assert failure(KeyError("k")).catch_exception(handlers).value == "key"
    assert failure(IndexError(0)).catch_exception(handlers).value == "lookup"


def test_catch_exception_without_match() -> None:
    """No matching handler: fallback runs, or the failure is returned as is."""
    err = failure(ValueError("v"))
    assert err.catch_exception({KeyError: lambda e: 1}) is err
    assert err.catch_exception({KeyError: lambda e: 1}, fallback=lambda e: "fallback").value == "fallback"
    assert failure("not an exception").catch_exception({Exception: lambda e: 1}).is_failure()


def test_match_and_match_exception() -> None:
    assert success(2).match(lambda v: v * 10, lambda e: -1) == 20
    assert failure("e").match(lambda v: v, lambda e, meta: (e, meta)) == ("e", {})

    handlers = {TimeoutError: lambda e: "timeout"}
    assert failure(TimeoutError()).match_exception(handlers, lambda v: "ok", lambda e: "other") == "timeout"
    assert failure(OSError()).match_exception(handlers, lambda v: "ok", lambda e: "other") == "other"
    assert success(1).match_exception(handlers, lambda v: "ok", lambda e: "other") == "ok"


# ═════════════════════════════════════════════════════════════════════════════
# Unwrapping
# ═════════════════════════════════════════════════════════════════════════════


def test_unwrap_success() -> None:
    assert success(42).unwrap() == 42


def test_unwrap_reraises_exception_error() -> None:
    err = ValueError("bad")
    with pytest.raises(ValueError) as info:
        failure(err).unwrap()
    assert info.value is err


def test_unwrap_non_exception_error() -> None:
    """String errors become the message, other payloads a generic one."""
    with pytest.raises(UnwrapError, match="out of stock"):
        failure("out of stock").unwrap()
    with pytest.raises(UnwrapError, match="Result failed") as info:
        failure({"code": 7}).unwrap()
    assert info.value.error == {"code": 7}


def test_unwrap_defaults() -> None:
    assert failure("e").unwrap_or(0) == 0
    assert success(1).unwrap_or(0) == 1
    assert failure("abc").unwrap_or_else(len) == 3


def test_get_or_raise_uses_factory() -> None:
    with pytest.raises(LookupError, match="missing user"):
        failure("missing user").get_or_raise(LookupError)
    assert success("x").get_or_raise(LookupError) == "x"


def test_raise_if_failure_serializes_payload() -> None:
    assert success(1).raise_if_failure() == success(1)
    with pytest.raises(UnwrapError, match='"code":7'):
        failure({"code": 7}).raise_if_failure()
    with pytest.raises(KeyError):
        failure(KeyError("k")).raise_if_failure()


# ═════════════════════════════════════════════════════════════════════════════
# Construction Helpers
# ═════════════════════════════════════════════════════════════════════════════


def test_of_traps_exceptions() -> None:
    assert of(lambda: 1) == success(1)
    out = of(lambda: 1 / 0)
    assert out.is_failure()
    assert isinstance(out.error, ZeroDivisionError)


def test_defer_adopts_outcomes() -> None:
    assert defer(lambda: failure("x", {"m": 1})) == failure("x", {"m": 1})
    assert defer(lambda: 5) == success(5)
    assert isinstance(defer(lambda: {}["missing"]).error, KeyError)


def test_base_exceptions_propagate() -> None:
    """Only Exception subclasses are trapped."""
    def interrupt() -> None:
        raise KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
        defer(interrupt)


def test_failure_with_value_records_value() -> None:
    out = failure_with_value("invalid", {"qty": -1}, {"req": "r"})
    assert out.meta == {"failed_value": {"qty": -1}, "req": "r"}


# ═════════════════════════════════════════════════════════════════════════════
# Collection Operations
# ═════════════════════════════════════════════════════════════════════════════


def test_combine_fail_fast_merges_meta_in_order() -> None:
    out = combine([success(1, {"a": 1, "x": 1}), failure("bad", {"x": 2}), success(3, {"c": 3})])
    assert out == failure("bad", {"a": 1, "x": 2})
    assert combine([success(1, {"a": 1}), success(2, {"a": 2})]) == success([1, 2], {"a": 2})


def test_combine_all_collects_errors() -> None:
    assert combine_all([success(1), failure("e1"), failure("e2")]).error == ["e1", "e2"]
    assert combine_all([]) == success([])


# ═════════════════════════════════════════════════════════════════════════════
# Output
# ═════════════════════════════════════════════════════════════════════════════


def test_to_dict_canonical_shape() -> None:
    assert success(1, {"m": 1}).to_dict() == {"ok": True, "value": 1, "error": None, "meta": {"m": 1}}
    assert failure("e").to_dict() == {"ok": False, "value": None, "error": "e", "meta": {}}


def test_bool_eq_repr() -> None:
    assert success(0)
    assert not failure("e")
    assert success(1, {"a": 1}) != success(1)
    assert repr(success(1)) == "success(1)"
    assert repr(failure("e", {"a": 1})) == "failure('e', meta={'a': 1})"
