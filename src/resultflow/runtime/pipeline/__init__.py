"""Step chaining engine behind Outcome.then()/otherwise()/then_unsafe()."""

from .pipe import ResolvedStep, StepKind, invoke_step, iter_steps, resolve_step, run_chain, step_name

__all__ = [
    "ResolvedStep",
    "StepKind",
    "invoke_step",
    "iter_steps",
    "resolve_step",
    "run_chain",
    "step_name",
]
