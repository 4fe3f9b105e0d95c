"""Retry engine for Outcome-producing operations.

Example:
    >>> from resultflow.runtime.retry import Retrier, retry
    >>>
    >>> out = retry(3, lambda: flaky_call(), delay=100, exponential=True)  # doctest: +SKIP
    >>>
    >>> out = (
    ...     Retrier()
    ...     .max_attempts(4)
    ...     .jitter(20)
    ...     .on_retry(lambda attempt, error, wait_ms: print(attempt, wait_ms))
    ...     .attach_attempt_meta()
    ...     .attempt(lambda: flaky_call())
    ... )  # doctest: +SKIP
"""

from .backoff import Backoff, ConstantBackoff, ExponentialBackoff
from .policy import (
    Retrier,
    RetryCallback,
    RetryPolicy,
    RetryPredicate,
    execute_with_retry,
    retrier,
    retry,
    retry_defer,
)

__all__ = [
    # Backoff strategies
    "Backoff",
    "ConstantBackoff",
    "ExponentialBackoff",
    # Policy
    "RetryPolicy",
    "RetryPredicate",
    "RetryCallback",
    "Retrier",
    # Execution
    "execute_with_retry",
    "retrier",
    "retry",
    "retry_defer",
]
