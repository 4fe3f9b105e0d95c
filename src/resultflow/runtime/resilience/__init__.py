"""Resilience combinators: acquire/use/release resource guard."""

from .bracket import RELEASE_EXCEPTION_KEY, bracket

__all__ = ["RELEASE_EXCEPTION_KEY", "bracket"]
