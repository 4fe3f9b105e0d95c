"""Acquire/use/release resource guard.

bracket() never leaks a resource it acquired and never swallows a failure:

- acquire fails (raises or returns a failure): returned as is, release is
  not called
- release always runs exactly once after use
- release raises after a failed use: the use failure is kept and the release
  exception is recorded under meta["bracket.release_exception"]
- release raises after a successful use: the release exception becomes the
  failure, carrying the use Outcome's metadata
- release succeeds: the use Outcome is returned unmodified

Example:
    >>> out = bracket(
    ...     acquire=lambda: open("data.txt"),
    ...     use=lambda fh: fh.read(),
    ...     release=lambda fh: fh.close(),
    ... )  # doctest: +SKIP
"""

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

from resultflow.monads.outcome import Outcome, defer, failure

logger = logging.getLogger("resultflow.bracket")

RELEASE_EXCEPTION_KEY = "bracket.release_exception"

Res = TypeVar("Res")


def bracket(
    acquire: Callable[[], Any],
    use: Callable[[Res], Any],
    release: Callable[[Res], object],
) -> Outcome[Any, Any]:
    """Safely acquire, use and release a resource.

    Args:
        acquire: Produces the resource (Outcome or raw value)
        use: Works with the resource (Outcome or raw value)
        release: Cleans up the resource, may raise

    Returns:
        The use Outcome, subject to the release failure rules above
    """
    acquired = defer(acquire)
    if acquired.is_failure():
        return acquired

    resource: Res = acquired.value  # type: ignore[assignment]
    used = defer(lambda: use(resource))

    try:
        release(resource)
    except Exception as e:
        logger.warning(f"Release of {type(resource).__name__} raised {type(e).__name__}: {e}")
        if used.is_failure():
            return used.merge_meta({RELEASE_EXCEPTION_KEY: e})
        return failure(e, used.meta)

    return used
