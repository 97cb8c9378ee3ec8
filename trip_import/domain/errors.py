"""Typed domain errors for the trip import flow.

Programmer errors (a step paired with the wrong pipeline, a missing
method choice) are raised as exceptions. Failures of the external
operations behind the asynchronous steps are raised by adapters as
StepOperationError and turned into error-step transitions by the
step runner, so they never escape to the presentation shell.

All errors inherit from TripImportError and can optionally
wrap a root cause exception for debugging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class TripImportError(Exception):
    """Base error for the trip import domain.

    Attributes:
        message: Human-readable error description
        cause: Optional underlying exception that caused this error
    """

    message: str
    cause: Optional[Exception] = field(default=None, repr=False)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass
class InvalidTransitionError(TripImportError):
    """A transition was requested that the step graph does not define.

    Raised when a step is asked for its successor under a method it does
    not belong to, when a terminal or error step is fed to the graph, or
    when a method is chosen anywhere but at method selection.

    Attributes:
        step: The step the transition was requested from
        method: The import method in effect, if any
    """

    step: str = ""
    method: Optional[str] = None


@dataclass
class MethodRequiredError(InvalidTransitionError):
    """Leaving method selection without an import method."""


@dataclass
class StepOperationError(TripImportError):
    """The external operation behind an asynchronous step failed.

    Attributes:
        step: The asynchronous step whose operation failed
        timed_out: Whether the failure was a timeout
    """

    step: str = ""
    timed_out: bool = False


@dataclass
class ConfigurationError(TripImportError):
    """Invalid or missing configuration.

    Attributes:
        setting_name: Name of the problematic setting
        expected_type: Expected type or format
    """

    setting_name: str = ""
    expected_type: Optional[str] = None
