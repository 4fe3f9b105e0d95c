"""Runtime - engines that drive Outcomes.

Contains: pipeline, retry, batch, resilience, observability.
"""

from __future__ import annotations

__all__ = [
    # Pipeline
    "StepKind", "ResolvedStep", "resolve_step", "iter_steps", "invoke_step", "step_name", "run_chain",
    # Retry
    "Backoff", "ConstantBackoff", "ExponentialBackoff",
    "RetryPolicy", "Retrier", "execute_with_retry", "retrier", "retry", "retry_defer",
    # Batch
    "map_items", "map_all", "map_collect_errors",
    # Resilience
    "bracket", "RELEASE_EXCEPTION_KEY",
    # Observability
    "Sanitizer", "SanitizerConfig", "sanitize", "to_debug_dict", "resolve_log_level", "log_outcome",
    "BoundLogger", "configure_logging", "get_logger", "log_context",
]

_SUBMODULES = {
    "pipeline": {"StepKind", "ResolvedStep", "resolve_step", "iter_steps", "invoke_step", "step_name", "run_chain"},
    "retry": {"Backoff", "ConstantBackoff", "ExponentialBackoff",
              "RetryPolicy", "Retrier", "execute_with_retry", "retrier", "retry", "retry_defer"},
    "batch": {"map_items", "map_all", "map_collect_errors"},
    "resilience": {"bracket", "RELEASE_EXCEPTION_KEY"},
    "observability": {"Sanitizer", "SanitizerConfig", "sanitize", "to_debug_dict", "resolve_log_level",
                      "log_outcome", "BoundLogger", "configure_logging", "get_logger", "log_context"},
}


def __getattr__(name: str):
    """Lazy imports to avoid circular dependencies."""
    import importlib

    for module, attrs in _SUBMODULES.items():
        if name in attrs:
            return getattr(importlib.import_module(f"{__name__}.{module}"), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
