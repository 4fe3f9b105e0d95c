"""Backoff strategies for retry policies.

Delays are whole milliseconds. Attempt numbers are 1-indexed: the delay
returned for attempt N is the wait after the N-th failed attempt.

- ConstantBackoff: same delay after every attempt
- ExponentialBackoff: base * 2^(attempt-1)

Jitter is added by the policy on top of either strategy.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@runtime_checkable
class Backoff(Protocol):
    """Protocol for backoff delay calculation."""

    def delay(self, attempt: int) -> int:
        """Calculate delay in milliseconds after the given (1-indexed) attempt."""
        ...


@dataclass(frozen=True, slots=True)
class ConstantBackoff:
    """Fixed delay between retries.

    Attributes:
        delay_ms: Fixed delay in milliseconds (default: 0)
    """

    delay_ms: int = 0

    def delay(self, attempt: int) -> int:
        return self.delay_ms


@dataclass(frozen=True, slots=True)
class ExponentialBackoff:
    """Exponential backoff doubling after each attempt.

    Delay = base_ms * 2^(attempt - 1), so attempts 1, 2, 3 wait
    base, 2*base, 4*base.

    Attributes:
        base_ms: Delay after the first attempt in milliseconds (default: 0)
    """

    base_ms: int = 0

    def delay(self, attempt: int) -> int:
        return self.base_ms * (2 ** (max(attempt, 1) - 1))
