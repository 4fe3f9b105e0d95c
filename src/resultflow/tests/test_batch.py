"""Tests for keyed batch mapping."""

from __future__ import annotations

from resultflow import Outcome, failure, map_all, map_collect_errors, map_items, success

ITEMS = {"a": 1, "b": 2, "c": 3}


def tracking(fail_on: str, visited: list[str]):
    def fn(item: int, key: str) -> object:
        visited.append(key)
        if key == fail_on:
            return failure(f"bad {key}", {"failed": key})
        return success(item * 10, {key: True})
    return fn


def test_map_all_stops_at_first_failure() -> None:
    visited: list[str] = []
    out = map_all(ITEMS, tracking("b", visited))
    assert visited == ["a", "b"]
    assert out == failure("bad b", {"a": True, "failed": "b"})


def test_map_all_success_collects_values_and_meta() -> None:
    out = map_all(ITEMS, lambda n: success(n + 1, {"last": n}))
    assert out == success({"a": 2, "b": 3, "c": 4}, {"last": 3})


def test_map_collect_errors_visits_everything() -> None:
    visited: list[str] = []
    out = map_collect_errors(ITEMS, tracking("b", visited))
    assert visited == ["a", "b", "c"]
    assert out.is_failure()
    assert out.error == {"b": "bad b"}
    assert out.meta == {"a": True, "failed": "b", "c": True}


def test_map_collect_errors_all_succeed() -> None:
    out = map_collect_errors(ITEMS, lambda n, key: f"{key}{n}")
    assert out == success({"a": "a1", "b": "b2", "c": "c3"})


def test_map_items_keeps_keys_and_traps_exceptions() -> None:
    out = map_items({"x": 4, "y": 0}, lambda n: 8 // n)
    assert set(out) == {"x", "y"}
    assert out["x"] == success(2)
    assert isinstance(out["y"].error, ZeroDivisionError)


def test_non_mapping_iterables_are_keyed_by_index() -> None:
    out = map_collect_errors(["ok", "", "fine"], lambda s: s or failure("empty"))
    assert out.error == {1: "empty"}
    assert map_all((n for n in (1, 2)), lambda n, i: n * i).value == {0: 0, 1: 2}


def test_invocable_item_function() -> None:
    class Upper:
        def execute(self, item: str) -> str:
            return item.upper()

    assert map_all(["a", "b"], Upper()).value == {0: "A", 1: "B"}


def test_empty_batch() -> None:
    assert map_all({}, lambda n: n) == success({})
    assert map_items([], lambda n: n) == {}


def test_outcome_static_shortcuts() -> None:
    assert Outcome.map_all([1], lambda n: n) == success({0: 1})
    assert Outcome.map_collect_errors([1], lambda n: failure(n)).error == {0: 1}
    assert Outcome.map_items([1], lambda n: n) == {0: success(1)}
