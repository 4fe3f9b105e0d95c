"""Keyed batch mapping over Outcome-producing functions.

Each item is mapped with fn(item, key) through the pipeline step invoker and
defer(), so an exception fails that item alone and never aborts the batch.
fn may also be an object exposing handle()/execute(). Raw returns become
successes with empty metadata.

- map_items: per-item Outcomes, same keys, no aggregation
- map_all: fail fast on the first failing item
- map_collect_errors: evaluate everything, collect errors by key

Mappings keep their keys; any other iterable is keyed by 0-based index.
Metadata is merged in iteration order, later keys overwriting earlier ones.

Example:
    >>> from resultflow import failure
    >>> out = map_collect_errors({"a": 1, "b": -2}, lambda n: n if n > 0 else failure("negative"))
    >>> out.error
    {'b': 'negative'}
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any, Callable

from resultflow.foundation.errors import Meta
from resultflow.monads.outcome import Outcome, defer, failure, success
from resultflow.runtime.pipeline import invoke_step

ItemFn = Callable[..., Any]


def _keyed(items: Mapping[Any, Any] | Iterable[Any]) -> Iterator[tuple[Any, Any]]:
    return iter(items.items()) if isinstance(items, Mapping) else enumerate(items)


def _map_one(fn: ItemFn, item: Any, key: Any) -> Outcome[Any, Any]:
    return defer(lambda: invoke_step(fn, item, key))


def map_items(items: Mapping[Any, Any] | Iterable[Any], fn: ItemFn) -> dict[Any, Outcome[Any, Any]]:
    """Map every item to its own Outcome, preserving keys."""
    return {key: _map_one(fn, item, key) for key, item in _keyed(items)}


def map_all(items: Mapping[Any, Any] | Iterable[Any], fn: ItemFn) -> Outcome[dict[Any, Any], Any]:
    """Map items, stopping at the first failure.

    Returns:
        failure with the failing item's error and the metadata merged so far
        (failing item included), or success of {key: value}
    """
    values: dict[Any, Any] = {}
    merged: Meta = {}

    for key, item in _keyed(items):
        out = _map_one(fn, item, key)
        merged.update(out.meta)
        if out.is_failure():
            return failure(out.error, merged)
        values[key] = out.value

    return success(values, merged)


def map_collect_errors(
    items: Mapping[Any, Any] | Iterable[Any], fn: ItemFn,
) -> Outcome[dict[Any, Any], dict[Any, Any]]:
    """Map every item, collecting errors by key instead of failing fast.

    Returns:
        failure of {key: error} when any item failed (successful values are
        dropped), otherwise success of {key: value}
    """
    values: dict[Any, Any] = {}
    errors: dict[Any, Any] = {}
    merged: Meta = {}

    for key, item in _keyed(items):
        out = _map_one(fn, item, key)
        merged.update(out.meta)
        if out.is_failure():
            errors[key] = out.error
        else:
            values[key] = out.value

    return failure(errors, merged) if errors else success(values, merged)
