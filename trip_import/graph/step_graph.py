"""Step graph of the import wizard.

The graph is a static table mapping each step to its successor. Most
edges are fixed; the two branch points (``email-provider`` and
``manual-type``) are functions of the data submitted on that step.
Terminal and error steps have no edge: leaving them is handled by the
flow controller (completion and retry respectively).
"""

from __future__ import annotations

from typing import Any, Callable, Dict, FrozenSet, Mapping, Optional, Tuple, Union

from ..domain.errors import InvalidTransitionError, MethodRequiredError
from ..domain.models import (
    EMAIL_PROVIDER_KEY,
    MANUAL_TYPE_KEY,
    OTHER_EMAIL_PROVIDER,
    ImportMethod,
    StepId,
)

BranchFn = Callable[[Mapping[str, Any]], StepId]
Transition = Union[StepId, BranchFn]

PIPELINE_STEPS: Dict[ImportMethod, Tuple[StepId, ...]] = {
    ImportMethod.EMAIL: (
        StepId.EMAIL_LINK,
        StepId.EMAIL_PROVIDER,
        StepId.EMAIL_INPUT,
        StepId.EMAIL_CONNECTING,
        StepId.EMAIL_SCANNING,
        StepId.EMAIL_BOOKINGS,
        StepId.EMAIL_SUCCESS,
        StepId.EMAIL_ERROR,
    ),
    ImportMethod.ACCOUNT_LINK: (
        StepId.LINK_PROVIDER,
        StepId.LINK_AUTH,
        StepId.LINK_CONNECTING,
        StepId.LINK_FETCHING,
        StepId.LINK_TRIPS,
        StepId.LINK_SUCCESS,
        StepId.LINK_ERROR,
    ),
    ImportMethod.MANUAL_ENTRY: (
        StepId.MANUAL_TYPE,
        StepId.MANUAL_FLIGHT,
        StepId.MANUAL_HOTEL,
        StepId.MANUAL_CAR,
        StepId.MANUAL_FETCHING,
        StepId.MANUAL_RESULT,
        StepId.MANUAL_SUCCESS,
        StepId.MANUAL_ERROR,
    ),
    ImportMethod.DOCUMENT_SCAN: (
        StepId.SCAN_CAMERA,
        StepId.SCAN_SCANNING,
        StepId.SCAN_RESULT,
        StepId.SCAN_SUCCESS,
    ),
}

FIRST_STEPS: Dict[ImportMethod, StepId] = {
    ImportMethod.EMAIL: StepId.EMAIL_LINK,
    ImportMethod.ACCOUNT_LINK: StepId.LINK_PROVIDER,
    ImportMethod.MANUAL_ENTRY: StepId.MANUAL_TYPE,
    ImportMethod.DOCUMENT_SCAN: StepId.SCAN_CAMERA,
}

TERMINAL_STEPS: Dict[ImportMethod, StepId] = {
    ImportMethod.EMAIL: StepId.EMAIL_SUCCESS,
    ImportMethod.ACCOUNT_LINK: StepId.LINK_SUCCESS,
    ImportMethod.MANUAL_ENTRY: StepId.MANUAL_SUCCESS,
    ImportMethod.DOCUMENT_SCAN: StepId.SCAN_SUCCESS,
}

# Document scan has no step waiting on external I/O, hence no error step.
ERROR_STEPS: Dict[ImportMethod, StepId] = {
    ImportMethod.EMAIL: StepId.EMAIL_ERROR,
    ImportMethod.ACCOUNT_LINK: StepId.LINK_ERROR,
    ImportMethod.MANUAL_ENTRY: StepId.MANUAL_ERROR,
}

ASYNC_STEPS: FrozenSet[StepId] = frozenset(
    {
        StepId.EMAIL_CONNECTING,
        StepId.EMAIL_SCANNING,
        StepId.LINK_CONNECTING,
        StepId.LINK_FETCHING,
        StepId.MANUAL_FETCHING,
    }
)

_MANUAL_INPUT_STEPS: Dict[str, StepId] = {
    "flight": StepId.MANUAL_FLIGHT,
    "hotel": StepId.MANUAL_HOTEL,
    "car": StepId.MANUAL_CAR,
}

_STEP_PIPELINE: Dict[StepId, ImportMethod] = {
    step: method for method, steps in PIPELINE_STEPS.items() for step in steps
}


def _after_email_provider(submitted: Mapping[str, Any]) -> StepId:
    # Known providers connect directly; "other" needs raw credentials first.
    if submitted.get(EMAIL_PROVIDER_KEY) == OTHER_EMAIL_PROVIDER:
        return StepId.EMAIL_INPUT
    return StepId.EMAIL_CONNECTING


def _after_manual_type(submitted: Mapping[str, Any]) -> StepId:
    # Unmapped types (e.g. "activity") fall back to the flight form.
    manual_type = submitted.get(MANUAL_TYPE_KEY)
    if not isinstance(manual_type, str):
        return StepId.MANUAL_FLIGHT
    return _MANUAL_INPUT_STEPS.get(manual_type, StepId.MANUAL_FLIGHT)


TRANSITIONS: Dict[StepId, Transition] = {
    # Email
    StepId.EMAIL_LINK: StepId.EMAIL_PROVIDER,
    StepId.EMAIL_PROVIDER: _after_email_provider,
    StepId.EMAIL_INPUT: StepId.EMAIL_CONNECTING,
    StepId.EMAIL_CONNECTING: StepId.EMAIL_SCANNING,
    StepId.EMAIL_SCANNING: StepId.EMAIL_BOOKINGS,
    StepId.EMAIL_BOOKINGS: StepId.EMAIL_SUCCESS,
    # Account link
    StepId.LINK_PROVIDER: StepId.LINK_AUTH,
    StepId.LINK_AUTH: StepId.LINK_CONNECTING,
    StepId.LINK_CONNECTING: StepId.LINK_FETCHING,
    StepId.LINK_FETCHING: StepId.LINK_TRIPS,
    StepId.LINK_TRIPS: StepId.LINK_SUCCESS,
    # Manual entry
    StepId.MANUAL_TYPE: _after_manual_type,
    StepId.MANUAL_FLIGHT: StepId.MANUAL_FETCHING,
    StepId.MANUAL_HOTEL: StepId.MANUAL_FETCHING,
    StepId.MANUAL_CAR: StepId.MANUAL_FETCHING,
    StepId.MANUAL_FETCHING: StepId.MANUAL_RESULT,
    StepId.MANUAL_RESULT: StepId.MANUAL_SUCCESS,
    # Document scan
    StepId.SCAN_CAMERA: StepId.SCAN_SCANNING,
    StepId.SCAN_SCANNING: StepId.SCAN_RESULT,
    StepId.SCAN_RESULT: StepId.SCAN_SUCCESS,
}


def pipeline_of(step: StepId) -> Optional[ImportMethod]:
    """Return the pipeline a step belongs to, None for method selection."""
    return _STEP_PIPELINE.get(step)


def steps_of(method: ImportMethod) -> Tuple[StepId, ...]:
    return PIPELINE_STEPS[method]


def first_step(method: ImportMethod) -> StepId:
    return FIRST_STEPS[method]


def is_terminal(step: StepId) -> bool:
    return step in TERMINAL_STEPS.values()


def is_error_step(step: StepId) -> bool:
    return step in ERROR_STEPS.values()


def is_async_step(step: StepId) -> bool:
    """Check whether a step waits on an external operation."""
    return step in ASYNC_STEPS


def error_step_for(method: ImportMethod) -> StepId:
    """Return the error step of a pipeline.

    Raises:
        InvalidTransitionError: If the pipeline has no asynchronous step.
    """
    try:
        return ERROR_STEPS[method]
    except KeyError:
        raise InvalidTransitionError(
            f"Pipeline {method.value} has no error step",
            method=method.value,
        ) from None


def next_step(
    current: StepId,
    method: Optional[ImportMethod],
    submitted: Mapping[str, Any],
) -> StepId:
    """Compute the step that follows ``current``.

    Parameters
    ----------
    current:
        The step being left.
    method:
        The import method in effect. Required at method selection, where
        it selects the pipeline to enter.
    submitted:
        The data merged so far, including what ``current`` just submitted.
        Only read by the branch points.

    Returns
    -------
    StepId
        The step to show next.

    Raises
    ------
    MethodRequiredError
        If ``current`` is method selection and no method is given.
    InvalidTransitionError
        If ``current`` does not belong to ``method``, or has no outgoing
        edge (terminal and error steps).
    """
    if current == StepId.METHOD_SELECTION:
        if method is None:
            raise MethodRequiredError(
                "An import method must be chosen to leave method selection",
                step=current.value,
            )
        return FIRST_STEPS[method]

    owner = pipeline_of(current)
    if method is None or owner != method:
        raise InvalidTransitionError(
            f"Step {current.value} does not belong to pipeline "
            f"{method.value if method else None}",
            step=current.value,
            method=method.value if method else None,
        )

    transition = TRANSITIONS.get(current)
    if transition is None:
        raise InvalidTransitionError(
            f"Step {current.value} has no outgoing edge",
            step=current.value,
            method=method.value,
        )

    if isinstance(transition, StepId):
        return transition
    return transition(submitted)


def retry_step(error_step: StepId, failed_step: Optional[StepId] = None) -> StepId:
    """Return the step an error step retries.

    The retry edge leads back to the asynchronous step that failed. When
    the failed step is unknown, the first asynchronous step of the
    pipeline is retried.

    Raises:
        InvalidTransitionError: If ``error_step`` is not an error step, or
            ``failed_step`` is not an asynchronous step of the same pipeline.
    """
    if not is_error_step(error_step):
        raise InvalidTransitionError(
            f"Step {error_step.value} is not an error step",
            step=error_step.value,
        )

    method = pipeline_of(error_step)
    assert method is not None

    if failed_step is None:
        return next(s for s in steps_of(method) if s in ASYNC_STEPS)

    if not is_async_step(failed_step) or pipeline_of(failed_step) != method:
        raise InvalidTransitionError(
            f"Step {failed_step.value} cannot be retried from {error_step.value}",
            step=failed_step.value,
            method=method.value,
        )
    return failed_step
