"""Positional-arity adaptation for user callbacks.

Steps and callbacks are documented with their full argument lists, e.g. a step
receives ``(input, meta)`` and a batch mapper receives ``(item, key)``. Most
callers only care about the first argument, so every callback is invoked with
as many leading arguments as its signature accepts.

Example:
    >>> call_adaptive(lambda x: x + 1, 1, {"meta": True})
    2
    >>> call_adaptive(lambda x, meta: meta, 1, {"meta": True})
    {'meta': True}
"""

from __future__ import annotations

import inspect
from functools import lru_cache
from typing import Any, Callable

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def _arity_uncached(fn: Callable[..., Any]) -> int | None:
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        # Uninspectable builtins (e.g. some C functions) get the first argument only
        return 1
    count = 0
    for param in sig.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return None
        if param.kind in _POSITIONAL:
            count += 1
    return count


@lru_cache(maxsize=1024)
def _arity_cached(fn: Callable[..., Any]) -> int | None:
    return _arity_uncached(fn)


def positional_arity(fn: Callable[..., Any]) -> int | None:
    """Number of positional arguments fn accepts, None when it takes *args."""
    try:
        return _arity_cached(fn)
    except TypeError:  # unhashable callable objects
        return _arity_uncached(fn)


def call_adaptive(fn: Callable[..., Any], *args: Any) -> Any:
    """Call fn with the leading arguments its signature can take."""
    n = positional_arity(fn)
    return fn(*args) if n is None or n >= len(args) else fn(*args[:n])
