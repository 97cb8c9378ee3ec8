"""Step graph and step metadata of the import wizard.

This subpackage contains the static transition table that decides which
step follows which, and the lookup tables used to number steps for the
progress indicator.
"""

from .metadata import ordinal, title, total_steps
from .step_graph import (
    ASYNC_STEPS,
    PIPELINE_STEPS,
    TRANSITIONS,
    error_step_for,
    first_step,
    is_async_step,
    is_error_step,
    is_terminal,
    next_step,
    pipeline_of,
    retry_step,
    steps_of,
)

__all__ = [
    "ASYNC_STEPS",
    "PIPELINE_STEPS",
    "TRANSITIONS",
    "error_step_for",
    "first_step",
    "is_async_step",
    "is_error_step",
    "is_terminal",
    "next_step",
    "pipeline_of",
    "retry_step",
    "steps_of",
    "ordinal",
    "title",
    "total_steps",
]
