"""Sequential step execution with railway-style short-circuiting.

A step is anything the engine knows how to call with ``(input, meta)``:

- FUNCTION: a callable, including ``(target, "method")`` pairs whose attribute
  is callable (a pair is one fused step, never split into two)
- INVOCABLE: an object exposing ``handle(input, meta)`` or ``execute(input, meta)``

A list or tuple of steps runs them in order. Nested sequences are flattened.

Each step's return drives the chain:

- Outcome failure: stop, return it
- Outcome success: its metadata replaces the running metadata, its value
  becomes the next input
- raw value: wrapped as success with the metadata as it stood entering the step
- raised exception: failure carrying the exception, metadata tagged with
  ``failed_step`` (only when trapping; then_unsafe lets it propagate)

Example:
    >>> from resultflow import success
    >>> success(2).then([lambda x: x + 1, lambda x, meta: x * 10]).value
    30
"""

from __future__ import annotations

import functools
import logging
import types
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Iterator

from resultflow.foundation.core import call_adaptive
from resultflow.foundation.errors import InvalidStepError, Meta
from resultflow.monads.outcome import Outcome, failure, success

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger("resultflow.pipeline")

_SEQUENCE_TYPES = (list, tuple)
_ANONYMOUS_TYPES = (types.FunctionType, types.BuiltinFunctionType, functools.partial)


class StepKind(Enum):
    """How a step is invoked, decided once per step by capability probing."""

    FUNCTION = "function"
    INVOCABLE = "invocable"
    SEQUENCE = "sequence"


@dataclass(frozen=True, slots=True)
class ResolvedStep:
    """A step normalized to a single invoke(input, meta) contract."""

    kind: StepKind
    source: object
    target: Callable[..., Any] | None = None
    steps: tuple[object, ...] = ()

    def invoke(self, arg: Any, meta: Meta) -> Any:
        """Call the underlying function or capability with (arg, meta)."""
        if self.target is None:
            raise InvalidStepError(self.source)
        return call_adaptive(self.target, arg, meta)


# ═════════════════════════════════════════════════════════════════════════════
# Step Resolution
# ═════════════════════════════════════════════════════════════════════════════


def _is_method_pair(step: object) -> bool:
    return (
        isinstance(step, _SEQUENCE_TYPES)
        and len(step) == 2
        and isinstance(step[1], str)
        and callable(getattr(step[0], step[1], None))
    )


def resolve_step(step: object) -> ResolvedStep:
    """Classify a step as FUNCTION, INVOCABLE or SEQUENCE.

    Raises:
        InvalidStepError: step has no recognized invocation capability
    """
    if _is_method_pair(step):
        target, method = step  # type: ignore[misc]
        return ResolvedStep(StepKind.FUNCTION, step, getattr(target, method))
    if callable(step):
        return ResolvedStep(StepKind.FUNCTION, step, step)
    if isinstance(step, _SEQUENCE_TYPES):
        return ResolvedStep(StepKind.SEQUENCE, step, steps=tuple(iter_steps(step)))
    for capability in ("handle", "execute"):
        if callable(fn := getattr(step, capability, None)):
            return ResolvedStep(StepKind.INVOCABLE, step, fn)
    raise InvalidStepError(step)


def iter_steps(next_: object) -> Iterator[object]:
    """Yield individual steps; a single step is a one-element sequence."""
    if not isinstance(next_, _SEQUENCE_TYPES) or _is_method_pair(next_):
        yield next_
        return
    for step in next_:
        yield from iter_steps(step)


def invoke_step(step: object, arg: Any, meta: Meta) -> Any:
    """Invoke one step: callable first, then handle(), then execute().

    Raises:
        InvalidStepError: step is not invocable (sequences included)
    """
    resolved = step if isinstance(step, ResolvedStep) else resolve_step(step)
    if resolved.kind is StepKind.SEQUENCE:
        raise InvalidStepError(step)
    return resolved.invoke(arg, meta)


def step_name(step: object) -> str:
    """Best-effort human friendly name for error context.

    Example:
        >>> step_name(lambda x: x)
        'closure'
        >>> step_name((dict(), "get"))
        'dict::get'
    """
    if _is_method_pair(step):
        target, method = step  # type: ignore[misc]
        return f"{_type_name(target)}::{method}"
    owner = getattr(step, "__self__", None)
    if isinstance(step, (types.MethodType, types.BuiltinMethodType)) and owner is not None and not isinstance(owner, types.ModuleType):
        return f"{_type_name(owner)}::{step.__name__}"
    if isinstance(step, _ANONYMOUS_TYPES):
        return "closure"
    return _type_name(step)


def _type_name(target: object) -> str:
    return target.__qualname__ if isinstance(target, type) else type(target).__qualname__


# ═════════════════════════════════════════════════════════════════════════════
# Chain Execution
# ═════════════════════════════════════════════════════════════════════════════


def run_chain(
    outcome: Outcome[Any, Any],
    next_: object,
    input_: Any,
    meta: Mapping[str, Any],
    *,
    trap: bool = True,
) -> Outcome[Any, Any]:
    """Execute steps in order against input_, short-circuiting on failure.

    Args:
        outcome: Accumulator returned when there are no steps
        next_: A single step or a sequence of steps
        input_: Input for the first step
        meta: Metadata entering the chain
        trap: Convert raised exceptions into failures (False re-raises)

    Returns:
        The last step's Outcome, or the first failure
    """
    acc, current, meta = outcome, input_, dict(meta)

    for step in iter_steps(next_):
        try:
            out = invoke_step(step, current, meta)
        except Exception as e:
            if not trap:
                raise
            name = step_name(step)
            logger.debug(f"Step {name} raised {type(e).__name__}: {e}")
            return failure(e, {**meta, "failed_step": name})

        if isinstance(out, Outcome):
            acc, meta = out, out.meta
            if out.is_failure():
                return out
            current = out.value
        else:
            acc, current = success(out, meta), out

    return acc
