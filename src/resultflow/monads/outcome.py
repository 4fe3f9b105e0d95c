"""Outcome: branch-aware success/failure container with metadata.

An Outcome is either a success carrying a value or a failure carrying an
error, and always carries a metadata dict on the side. Absence of the other
branch is tracked by the success flag, so None/False/0/"" are valid payloads
on either side.

Every operation returns a new Outcome; nothing is mutated in place. Callbacks
receive ``(payload, meta)`` but may declare fewer parameters.

Example:
    >>> from resultflow import success
    >>> out = (
    ...     success(5, {"request_id": "abc"})
    ...     .then(lambda x: x * 2)
    ...     .ensure(lambda x: x > 5, "too small")
    ...     .map_value(lambda x, meta: f"{meta['request_id']}:{x}")
    ... )
    >>> out.unwrap()
    'abc:10'
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any, Callable, Generic, TypeVar, cast

from resultflow.foundation.core import call_adaptive
from resultflow.foundation.errors import EMPTY_META, Meta, MetaInput, UnwrapError

if TYPE_CHECKING:
    from resultflow.runtime.observability.sanitizer import Sanitizer
    from resultflow.runtime.retry.policy import Retrier

S = TypeVar("S")  # Success type
F = TypeVar("F")  # Failure type
U = TypeVar("U")
R = TypeVar("R")

# Sentinels for faster construction
_OK = True
_FAIL = False


class Outcome(Generic[S, F]):
    """Discriminated union of success (value) and failure (error) plus metadata.

    Use success()/failure() to construct. Chaining lives on the instance:

    - then / flat_map / then_unsafe: continue on success
    - otherwise / catch_exception / recover: continue on failure
    - map_value / map_error / merge_meta / replace_meta: pure transforms
    - match / unwrap family: leave the Outcome world

    Notes:
        - Uses __slots__ for minimal footprint
        - meta is copied on the way in and on the way out
    """

    __slots__ = ("_ok", "_value", "_error", "_meta")

    def __init__(self, ok: bool, value: Any, error: Any, meta: Mapping[str, Any] | None = None) -> None:
        """Private constructor. Use success() or failure() instead."""
        self._ok = ok
        self._value = value
        self._error = error
        self._meta: Meta = dict(meta) if meta else {}

    # ─── State ───────────────────────────────────────────────────────

    def is_success(self) -> bool:
        return self._ok

    def is_failure(self) -> bool:
        return not self._ok

    # ─── Access ──────────────────────────────────────────────────────

    @property
    def value(self) -> S | None:
        """Success payload, None on failure."""
        return cast(S, self._value)

    @property
    def error(self) -> F | None:
        """Failure payload, None on success."""
        return cast(F, self._error)

    @property
    def meta(self) -> Meta:
        """Shallow copy of the metadata."""
        return dict(self._meta)

    # ─── Metadata ────────────────────────────────────────────────────

    def _with_meta(self, meta: Mapping[str, Any]) -> Outcome[S, F]:
        return Outcome(self._ok, self._value, self._error, meta)

    def merge_meta(self, extra: Mapping[str, Any]) -> Outcome[S, F]:
        """Shallow merge; keys in extra overwrite existing keys."""
        return self._with_meta({**self._meta, **extra})

    def replace_meta(self, fn: Callable[[Meta], Mapping[str, Any]]) -> Outcome[S, F]:
        """Replace metadata with fn(meta)."""
        return self._with_meta(fn(self.meta))

    def tap_meta(self, fn: Callable[[Meta], object]) -> Outcome[S, F]:
        """Call fn with the metadata for side effects, return self."""
        fn(self.meta)
        return self

    # ─── Taps ────────────────────────────────────────────────────────

    def tap(self, fn: Callable[..., object]) -> Outcome[S, F]:
        """Call fn(value, error, meta) regardless of branch, return self."""
        call_adaptive(fn, self._value, self._error, self.meta)
        return self

    def on_success(self, fn: Callable[..., object]) -> Outcome[S, F]:
        """Call fn(value, meta) on success, return self."""
        if self._ok:
            call_adaptive(fn, self._value, self.meta)
        return self

    def on_failure(self, fn: Callable[..., object]) -> Outcome[S, F]:
        """Call fn(error, meta) on failure, return self."""
        if not self._ok:
            call_adaptive(fn, self._error, self.meta)
        return self

    inspect = on_success
    inspect_err = on_failure

    # ─── Transforms ──────────────────────────────────────────────────

    def map_value(self, fn: Callable[..., U]) -> Outcome[U, F]:
        """Map fn(value, meta) over a success; failures are returned unchanged."""
        if not self._ok:
            return cast("Outcome[U, F]", self)
        return Outcome(_OK, call_adaptive(fn, self._value, self.meta), None, self._meta)

    def map_error(self, fn: Callable[..., U]) -> Outcome[S, U]:
        """Map fn(error, meta) over a failure; successes are returned unchanged."""
        if self._ok:
            return cast("Outcome[S, U]", self)
        return Outcome(_FAIL, None, call_adaptive(fn, self._error, self.meta), self._meta)

    def ensure(self, predicate: Callable[..., bool], error: Any) -> Outcome[S, Any]:
        """Fail a success whose predicate(value, meta) is false.

        error may be a payload or a callable (value, meta) -> payload.
        """
        if not self._ok or call_adaptive(predicate, self._value, self.meta):
            return self
        err = call_adaptive(error, self._value, self.meta) if callable(error) else error
        return Outcome(_FAIL, None, err, self._meta)

    def recover(self, fn: Callable[..., U]) -> Outcome[S | U, Any]:
        """Turn a failure into success of fn(error, meta), keeping metadata."""
        if self._ok:
            return cast("Outcome[S | U, Any]", self)
        return Outcome(_OK, call_adaptive(fn, self._error, self.meta), None, self._meta)

    # ─── Chaining ────────────────────────────────────────────────────

    def then(self, step: Any) -> Outcome[Any, Any]:
        """Run one step or a sequence of steps on the success value.

        Raised exceptions become failures tagged with ``failed_step`` in meta.
        Failures pass through untouched.
        """
        if not self._ok:
            return self
        from resultflow.runtime.pipeline import run_chain
        return run_chain(self, step, self._value, self.meta)

    flat_map = then

    def then_unsafe(self, step: Any) -> Outcome[Any, Any]:
        """Like then(), but exceptions raised by steps propagate to the caller."""
        if not self._ok:
            return self
        from resultflow.runtime.pipeline import run_chain
        return run_chain(self, step, self._value, self.meta, trap=False)

    def otherwise(self, step: Any) -> Outcome[Any, Any]:
        """Run one step or a sequence of steps on the failure error.

        Once a handler recovers to success, later otherwise() calls are skipped.
        """
        if self._ok:
            return self
        from resultflow.runtime.pipeline import run_chain
        return run_chain(self, step, self._error, self.meta)

    def catch_exception(
        self,
        handlers: Mapping[type[BaseException], Callable[..., Any]],
        fallback: Callable[..., Any] | None = None,
    ) -> Outcome[Any, Any]:
        """Handle a failure by the class of its exception error.

        The first handler whose class matches (isinstance) runs with
        (error, meta). Without a match the fallback runs, or the Outcome is
        returned unchanged. Raw handler returns become successes.
        """
        if self._ok:
            return self
        handler = _find_handler(self._error, handlers) or fallback
        if handler is None:
            return self
        return self._adopt(call_adaptive(handler, self._error, self.meta))

    def _adopt(self, out: Any) -> Outcome[Any, Any]:
        return out if isinstance(out, Outcome) else Outcome(_OK, out, None, self._meta)

    # ─── Matching ────────────────────────────────────────────────────

    def match(self, on_success: Callable[..., R], on_failure: Callable[..., R]) -> R:
        """Exhaustive case analysis over both branches."""
        if self._ok:
            return call_adaptive(on_success, self._value, self.meta)
        return call_adaptive(on_failure, self._error, self.meta)

    def match_exception(
        self,
        handlers: Mapping[type[BaseException], Callable[..., R]],
        on_success: Callable[..., R],
        on_unhandled: Callable[..., R],
    ) -> R:
        """Like match(), dispatching exception failures by class first."""
        if self._ok:
            return call_adaptive(on_success, self._value, self.meta)
        handler = _find_handler(self._error, handlers) or on_unhandled
        return call_adaptive(handler, self._error, self.meta)

    # ─── Unwrapping ──────────────────────────────────────────────────

    def unwrap(self) -> S:
        """Return the value; raise the error if it is an exception.

        Raises:
            BaseException: the failure's own exception
            UnwrapError: for non-exception errors
        """
        if self._ok:
            return cast(S, self._value)
        if isinstance(self._error, BaseException):
            raise self._error
        raise UnwrapError(self._error if isinstance(self._error, str) else "Result failed", self._error)

    def unwrap_or(self, default: S) -> S:
        return cast(S, self._value) if self._ok else default

    def unwrap_or_else(self, fn: Callable[..., S]) -> S:
        """Return the value or compute one from fn(error, meta)."""
        return cast(S, self._value) if self._ok else call_adaptive(fn, self._error, self.meta)

    def get_or_raise(self, factory: Callable[..., BaseException]) -> S:
        """Return the value or raise the exception built by factory(error, meta)."""
        if self._ok:
            return cast(S, self._value)
        raise call_adaptive(factory, self._error, self.meta)

    def raise_if_failure(self) -> Outcome[S, F]:
        """Return self on success, escalate the failure into an exception otherwise.

        Useful inside a transaction boundary that rolls back on exceptions.
        """
        if self._ok:
            return self
        if isinstance(self._error, BaseException):
            raise self._error
        raise UnwrapError(_stringify(self._error), self._error)

    # ─── Output ──────────────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        """Canonical 4-field shape consumed by serializers and response adapters."""
        return {"ok": self._ok, "value": self._value, "error": self._error, "meta": self.meta}

    def to_debug_dict(self, sanitizer: Callable[[Any], Any] | Sanitizer | None = None) -> dict[str, Any]:
        """Redaction-safe diagnostic view, see runtime.observability.debug."""
        from resultflow.runtime.observability.debug import to_debug_dict
        return to_debug_dict(self, sanitizer)

    # ─── Engine shortcuts ────────────────────────────────────────────

    @staticmethod
    def retry(times: int, fn: Callable[[], Any], delay: int = 0, exponential: bool = False) -> Outcome[Any, Any]:
        """Retry fn up to `times` attempts with an optional delay in milliseconds."""
        from resultflow.runtime.retry import retry
        return retry(times, fn, delay, exponential)

    @staticmethod
    def retry_defer(times: int, fn: Callable[[], Any], delay: int = 0, exponential: bool = False) -> Outcome[Any, Any]:
        from resultflow.runtime.retry import retry_defer
        return retry_defer(times, fn, delay, exponential)

    @staticmethod
    def retrier() -> Retrier:
        """Fresh fluent retry builder."""
        from resultflow.runtime.retry import Retrier
        return Retrier()

    @staticmethod
    def bracket(
        acquire: Callable[[], Any], use: Callable[[Any], Any], release: Callable[[Any], object],
    ) -> Outcome[Any, Any]:
        from resultflow.runtime.resilience import bracket
        return bracket(acquire, use, release)

    @staticmethod
    def map_items(items: Mapping[Any, Any] | Iterable[Any], fn: Callable[..., Any]) -> dict[Any, Outcome[Any, Any]]:
        from resultflow.runtime.batch import map_items
        return map_items(items, fn)

    @staticmethod
    def map_all(items: Mapping[Any, Any] | Iterable[Any], fn: Callable[..., Any]) -> Outcome[dict[Any, Any], Any]:
        from resultflow.runtime.batch import map_all
        return map_all(items, fn)

    @staticmethod
    def map_collect_errors(
        items: Mapping[Any, Any] | Iterable[Any], fn: Callable[..., Any],
    ) -> Outcome[dict[Any, Any], dict[Any, Any]]:
        from resultflow.runtime.batch import map_collect_errors
        return map_collect_errors(items, fn)

    # ─── Dunder Methods ──────────────────────────────────────────────

    def __bool__(self) -> bool:
        """True on success."""
        return self._ok

    def __eq__(self, other: object) -> bool:
        """Structural equality, metadata included."""
        if not isinstance(other, Outcome):
            return NotImplemented
        return (self._ok, self._value, self._error, self._meta) == (other._ok, other._value, other._error, other._meta)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        payload = f"success({self._value!r}" if self._ok else f"failure({self._error!r}"
        return f"{payload}, meta={self._meta!r})" if self._meta else f"{payload})"


# ═════════════════════════════════════════════════════════════════════════════
# Constructor Functions
# ═════════════════════════════════════════════════════════════════════════════


def success(value: S, meta: MetaInput = None) -> Outcome[S, Any]:
    """Construct a success Outcome."""
    return Outcome(_OK, value, None, meta or EMPTY_META)


def failure(error: F, meta: MetaInput = None) -> Outcome[Any, F]:
    """Construct a failure Outcome."""
    return Outcome(_FAIL, None, error, meta or EMPTY_META)


def failure_with_value(error: F, failed_value: Any, meta: MetaInput = None) -> Outcome[Any, F]:
    """Failure that records the offending value under meta['failed_value']."""
    return failure(error, {"failed_value": failed_value, **(meta or EMPTY_META)})


def of(fn: Callable[[], S]) -> Outcome[S, Exception]:
    """Call fn, wrapping its return as success and any exception as failure.

    The return value is wrapped even when it is itself an Outcome; use defer()
    to adopt returned Outcomes.
    """
    try:
        return success(fn())
    except Exception as e:
        return failure(e)


def defer(fn: Callable[[], Any]) -> Outcome[Any, Any]:
    """Call fn and normalize its output: Outcomes are adopted, raw values wrapped, exceptions trapped."""
    try:
        out = fn()
    except Exception as e:
        return failure(e)
    return out if isinstance(out, Outcome) else success(out)


# ═════════════════════════════════════════════════════════════════════════════
# Collection Operations
# ═════════════════════════════════════════════════════════════════════════════


def combine(outcomes: Iterable[Outcome[S, F]]) -> Outcome[list[S], F]:
    """Fail fast on the first failure, otherwise success of all values.

    Metadata is merged in iteration order, later keys overwriting earlier ones,
    up to and including the failing Outcome.

    Example:
        >>> combine([success(1), success(2)]).value
        [1, 2]
        >>> combine([success(1), failure("bad"), success(3)]).error
        'bad'
    """
    values: list[S] = []
    merged: Meta = {}
    for out in outcomes:
        merged.update(out._meta)
        if not out._ok:
            return failure(cast(F, out._error), merged)
        values.append(cast(S, out._value))
    return success(values, merged)


def combine_all(outcomes: Iterable[Outcome[S, F]]) -> Outcome[list[S], list[F]]:
    """Collect every error instead of failing fast.

    Example:
        >>> combine_all([success(1), failure("e1"), failure("e2")]).error
        ['e1', 'e2']
    """
    values: list[S] = []
    errors: list[F] = []
    merged: Meta = {}
    for out in outcomes:
        merged.update(out._meta)
        if out._ok:
            values.append(cast(S, out._value))
        else:
            errors.append(cast(F, out._error))
    return failure(errors, merged) if errors else success(values, merged)


# ═════════════════════════════════════════════════════════════════════════════
# Helpers
# ═════════════════════════════════════════════════════════════════════════════


def _find_handler(error: Any, handlers: Mapping[type[BaseException], Callable[..., R]]) -> Callable[..., R] | None:
    if isinstance(error, BaseException):
        for cls, handler in handlers.items():
            if isinstance(error, cls):
                return handler
    return None


def _stringify(error: Any) -> str:
    """Best-effort textual rendering of an error payload."""
    if isinstance(error, str):
        return error
    import orjson
    try:
        return orjson.dumps(error, option=orjson.OPT_NON_STR_KEYS).decode()
    except TypeError:
        return repr(error)
