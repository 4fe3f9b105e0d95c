"""Exception types raised by resultflow itself.

Domain failures travel through the Outcome failure channel and are never
represented here. These exceptions cover contract violations and explicit
escalation via the unwrap family.
"""

from __future__ import annotations

from typing import Any


class ResultFlowError(Exception):
    """Base class for exceptions raised by resultflow."""


class InvalidStepError(ResultFlowError, TypeError):
    """A pipeline step is neither callable nor exposes handle()/execute().

    Inside then()/otherwise() this is trapped into a failure Outcome like any
    other exception; then_unsafe() lets it propagate.
    """

    __slots__ = ("step_type",)

    def __init__(self, step: object) -> None:
        self.step_type = type(step).__qualname__
        super().__init__(
            f"Step of type {self.step_type} is not callable and has no handle() or execute() method."
        )


class UnwrapError(ResultFlowError, RuntimeError):
    """Raised when unwrapping a failure whose error is not an exception."""

    __slots__ = ("error",)

    def __init__(self, message: str, error: Any = None) -> None:
        self.error = error
        super().__init__(message)
