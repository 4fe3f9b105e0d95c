"""Callable plumbing shared by the Outcome combinators."""

from .arity import call_adaptive, positional_arity

__all__ = ["call_adaptive", "positional_arity"]
