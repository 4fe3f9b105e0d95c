"""Outcome container and its constructors.

Example:
    >>> from resultflow.monads import success, failure, combine
    >>> combine([success(1, {"a": 1}), success(2, {"b": 2})]).meta
    {'a': 1, 'b': 2}
"""

from .outcome import (
    Outcome,
    combine,
    combine_all,
    defer,
    failure,
    failure_with_value,
    of,
    success,
)

__all__ = [
    # Core type
    "Outcome",
    # Constructors
    "success",
    "failure",
    "failure_with_value",
    "of",
    "defer",
    # Collection operations
    "combine",
    "combine_all",
]
