"""Retry policy configuration and the synchronous attempt loop.

RetryPolicy is an immutable pydantic model built fresh per call by the fluent
Retrier builder and consumed once by execute_with_retry().

Loop per attempt (1-indexed):

- operation raises: the exception is the last error, failure recorded
- operation returns a success Outcome or a raw value: done
- operation returns a failure Outcome: its error is the last error
- after a failure stop when attempts are exhausted or when(error, attempt)
  is false, otherwise compute the wait, call on_retry(attempt, error, wait_ms)
  and sleep before the next attempt

Example:
    >>> from resultflow.runtime.retry import Retrier
    >>> out = (
    ...     Retrier()
    ...     .max_attempts(5)
    ...     .delay(100)
    ...     .exponential()
    ...     .jitter(50)
    ...     .when(lambda error, attempt: isinstance(error, TimeoutError))
    ...     .attempt(lambda: fetch_profile())
    ... )  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import random
import time
from typing import Annotated, Any, Callable

from pydantic import BaseModel, ConfigDict, Field, field_validator

from resultflow.foundation.config import get_settings
from resultflow.foundation.core import call_adaptive
from resultflow.monads.outcome import Outcome, defer, failure, success

from .backoff import Backoff, ConstantBackoff, ExponentialBackoff

logger = logging.getLogger("resultflow.retry")

RetryPredicate = Callable[[Any, int], bool]
RetryCallback = Callable[[int, Any, int], object]


def _always(error: Any, attempt: int) -> bool:
    return True


def _noop(attempt: int, error: Any, wait_ms: int) -> None:
    return None


class RetryPolicy(BaseModel):
    """Immutable retry configuration.

    Out-of-range numbers are clamped rather than rejected: max_attempts to at
    least 1, delay and jitter to at least 0.

    Attributes:
        max_attempts: Total attempts including the first
        delay_ms: Base delay between attempts in milliseconds
        exponential: Double the delay after each attempt
        jitter_ms: Upper bound of uniform random jitter added to each wait
        when: Continue-predicate (error, attempt) -> bool
        on_retry: Callback (attempt, error, wait_ms) invoked before sleeping
        attach_attempt_meta: Merge {"retry": {"attempts": N}} into the result
    """

    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,
        extra="forbid",
        revalidate_instances="never",
        json_schema_extra={
            "title": "Retry Policy",
            "examples": [{"max_attempts": 3, "delay_ms": 100, "exponential": True, "jitter_ms": 25}],
        },
    )

    max_attempts: Annotated[int, Field(ge=1)] = 1
    delay_ms: Annotated[int, Field(ge=0)] = 0
    exponential: bool = False
    jitter_ms: Annotated[int, Field(ge=0)] = 0
    when: RetryPredicate = Field(default=_always, exclude=True, repr=False)
    on_retry: RetryCallback = Field(default=_noop, exclude=True, repr=False)
    attach_attempt_meta: bool = False

    @field_validator("max_attempts", mode="before")
    @classmethod
    def _clamp_attempts(cls, v: int) -> int:
        return max(1, int(v))

    @field_validator("delay_ms", "jitter_ms", mode="before")
    @classmethod
    def _clamp_non_negative(cls, v: int) -> int:
        return max(0, int(v))

    @property
    def backoff(self) -> Backoff:
        """Delay strategy selected by the exponential flag."""
        return ExponentialBackoff(self.delay_ms) if self.exponential else ConstantBackoff(self.delay_ms)

    def wait_ms(self, attempt: int) -> int:
        """Wait after the given failed attempt, jitter included."""
        wait = self.backoff.delay(attempt)
        return wait + random.randint(0, self.jitter_ms) if self.jitter_ms > 0 else wait

    def should_retry(self, error: Any, attempt: int) -> bool:
        """Whether another attempt follows the given failed attempt."""
        return attempt < self.max_attempts and bool(call_adaptive(self.when, error, attempt))


def execute_with_retry(operation: Callable[[], Any], policy: RetryPolicy) -> Outcome[Any, Any]:
    """Run operation under policy and return the final Outcome.

    Exceptions raised by the operation are trapped; exceptions raised by the
    predicate or the callback propagate.
    """
    attempt = 0

    while True:
        attempt += 1
        try:
            out = operation()
        except Exception as e:
            last_error: Any = e
            result = failure(e)
        else:
            if not isinstance(out, Outcome):
                return _finish(success(out), attempt, policy)
            if out.is_success():
                return _finish(out, attempt, policy)
            last_error, result = out.error, out

        if not policy.should_retry(last_error, attempt):
            return _finish(result, attempt, policy)

        wait = policy.wait_ms(attempt)
        logger.info(f"Retry {attempt}/{policy.max_attempts} after {wait}ms ({type(last_error).__name__})")
        call_adaptive(policy.on_retry, attempt, last_error, wait)
        if wait > 0:
            time.sleep(wait / 1000)


def _finish(result: Outcome[Any, Any], attempts: int, policy: RetryPolicy) -> Outcome[Any, Any]:
    return result.merge_meta({"retry": {"attempts": attempts}}) if policy.attach_attempt_meta else result


class Retrier:
    """Fluent, single-use retry builder.

    Each setter returns the builder; attempt() freezes the configuration into
    a RetryPolicy and runs the loop. Create a new Retrier per call.
    """

    __slots__ = ("_max_attempts", "_delay_ms", "_exponential", "_jitter_ms", "_when", "_on_retry", "_attach_meta")

    def __init__(self) -> None:
        self._max_attempts = 1
        self._delay_ms = 0
        self._exponential = False
        self._jitter_ms = 0
        self._when: RetryPredicate = _always
        self._on_retry: RetryCallback = _noop
        self._attach_meta = False

    @classmethod
    def from_settings(cls) -> Retrier:
        """Builder seeded with RESULTFLOW_RETRY_* defaults."""
        cfg = get_settings().retry
        return (
            cls()
            .max_attempts(cfg.max_attempts)
            .delay(cfg.delay_ms)
            .exponential(cfg.exponential)
            .jitter(cfg.jitter_ms)
            .attach_attempt_meta(cfg.attach_attempt_meta)
        )

    def max_attempts(self, times: int) -> Retrier:
        """Maximum number of attempts (minimum 1)."""
        self._max_attempts = max(1, times)
        return self

    def delay(self, ms: int) -> Retrier:
        """Base delay between attempts in milliseconds."""
        self._delay_ms = max(0, ms)
        return self

    def exponential(self, enabled: bool = True) -> Retrier:
        self._exponential = enabled
        return self

    def jitter(self, ms: int) -> Retrier:
        """Add uniform random jitter in [0, ms] to every wait."""
        self._jitter_ms = max(0, ms)
        return self

    def attach_attempt_meta(self, enabled: bool = True) -> Retrier:
        self._attach_meta = enabled
        return self

    def when(self, predicate: RetryPredicate) -> Retrier:
        """Retry only while predicate(error, attempt) is true."""
        self._when = predicate
        return self

    def on_retry(self, callback: RetryCallback) -> Retrier:
        """Callback (attempt, error, wait_ms) invoked before each sleep."""
        self._on_retry = callback
        return self

    def build(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self._max_attempts,
            delay_ms=self._delay_ms,
            exponential=self._exponential,
            jitter_ms=self._jitter_ms,
            when=self._when,
            on_retry=self._on_retry,
            attach_attempt_meta=self._attach_meta,
        )

    def attempt(self, operation: Callable[[], Any]) -> Outcome[Any, Any]:
        """Run operation with the configured retry behavior."""
        return execute_with_retry(operation, self.build())


# ═════════════════════════════════════════════════════════════════════════════
# Shortcuts
# ═════════════════════════════════════════════════════════════════════════════


def retrier() -> Retrier:
    """Fresh fluent builder for advanced configuration (jitter, callbacks)."""
    return Retrier()


def retry(times: int, operation: Callable[[], Any], delay: int = 0, exponential: bool = False) -> Outcome[Any, Any]:
    """Simple retry with optional delay (ms) and exponential backoff."""
    return Retrier().max_attempts(times).delay(delay).exponential(exponential).attempt(operation)


def retry_defer(times: int, operation: Callable[[], Any], delay: int = 0, exponential: bool = False) -> Outcome[Any, Any]:
    """retry() with each attempt normalized through defer()."""
    return retry(times, lambda: defer(operation), delay, exponential)
