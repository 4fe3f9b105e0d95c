"""resultflow - branch-aware Outcomes with metadata, pipelines and retries.

An Outcome is either a success carrying a value or a failure carrying an
error, plus a metadata dict that travels along every transformation.
Steps are plain callables, (object, "method") pairs, objects exposing
handle()/execute(), or lists of any of these.

Quick Start:
    >>> from resultflow import success, failure, Outcome
    >>>
    >>> out = (
    ...     success({"qty": 3}, {"request_id": "r-1"})
    ...     .ensure(lambda order: order["qty"] > 0, "empty order")
    ...     .then(lambda order, meta: {**order, "total": order["qty"] * 10})
    ...     .map_value(lambda order: order["total"])
    ... )
    >>> out.value, out.meta
    (30, {'request_id': 'r-1'})

Retry and resource safety:
    >>> Outcome.retry(3, lambda: fetch_rates(), delay=100, exponential=True)  # doctest: +SKIP
    >>> Outcome.bracket(lambda: open("f.txt"), lambda fh: fh.read(), lambda fh: fh.close())  # doctest: +SKIP

Batches:
    >>> from resultflow import map_collect_errors
    >>> map_collect_errors([1, -1], lambda n: n if n > 0 else failure("negative")).error
    {1: 'negative'}

Diagnostics:
    >>> failure(PermissionError("denied"), {"token": "abc"}).to_debug_dict()["meta"]
    {'token': '***REDACTED***'}
"""

from __future__ import annotations

__version__ = "0.1.0"

# Core
from .monads import Outcome, combine, combine_all, defer, failure, failure_with_value, of, success

# Errors
from .foundation.errors import InvalidStepError, ResultFlowError, UnwrapError

# Config
from .foundation.config import ResultFlowSettings, clear_settings_cache, get_settings

# Engines
from .runtime.batch import map_all, map_collect_errors, map_items
from .runtime.pipeline import StepKind, resolve_step
from .runtime.resilience import RELEASE_EXCEPTION_KEY, bracket
from .runtime.retry import ConstantBackoff, ExponentialBackoff, Retrier, RetryPolicy, retrier, retry, retry_defer

# Observability
from .runtime.observability import (
    Sanitizer,
    SanitizerConfig,
    configure_logging,
    get_logger,
    log_outcome,
    to_debug_dict,
)

__all__ = [
    "__version__",
    # Core
    "Outcome", "success", "failure", "failure_with_value", "of", "defer", "combine", "combine_all",
    # Errors
    "ResultFlowError", "InvalidStepError", "UnwrapError",
    # Config
    "ResultFlowSettings", "get_settings", "clear_settings_cache",
    # Pipeline
    "StepKind", "resolve_step",
    # Retry
    "Retrier", "RetryPolicy", "ConstantBackoff", "ExponentialBackoff", "retrier", "retry", "retry_defer",
    # Batch
    "map_items", "map_all", "map_collect_errors",
    # Resilience
    "bracket", "RELEASE_EXCEPTION_KEY",
    # Observability
    "Sanitizer", "SanitizerConfig", "to_debug_dict", "log_outcome", "configure_logging", "get_logger",
]
