"""Step metadata used for progress display.

Ordinals are pipeline-local: the same number repeats across pipelines
because the indicator only ever numbers the active pipeline.
"""

from __future__ import annotations

from typing import Dict, Optional

from ..domain.models import ImportMethod, StepId

STEP_ORDINALS: Dict[StepId, int] = {
    StepId.METHOD_SELECTION: 1,
    # Email
    StepId.EMAIL_LINK: 2,
    StepId.EMAIL_PROVIDER: 3,
    StepId.EMAIL_INPUT: 4,
    StepId.EMAIL_CONNECTING: 5,
    StepId.EMAIL_SCANNING: 6,
    StepId.EMAIL_BOOKINGS: 7,
    StepId.EMAIL_SUCCESS: 8,
    # Account link
    StepId.LINK_PROVIDER: 2,
    StepId.LINK_AUTH: 3,
    StepId.LINK_CONNECTING: 4,
    StepId.LINK_FETCHING: 5,
    StepId.LINK_TRIPS: 6,
    StepId.LINK_SUCCESS: 7,
    # Manual entry
    StepId.MANUAL_TYPE: 2,
    StepId.MANUAL_FLIGHT: 3,
    StepId.MANUAL_HOTEL: 3,
    StepId.MANUAL_CAR: 3,
    StepId.MANUAL_FETCHING: 4,
    StepId.MANUAL_RESULT: 5,
    StepId.MANUAL_SUCCESS: 6,
    # Document scan
    StepId.SCAN_CAMERA: 2,
    StepId.SCAN_SCANNING: 3,
    StepId.SCAN_RESULT: 4,
    StepId.SCAN_SUCCESS: 5,
    # Error steps sit at the last asynchronous step of their pipeline
    StepId.EMAIL_ERROR: 6,
    StepId.LINK_ERROR: 5,
    StepId.MANUAL_ERROR: 4,
}

TOTAL_STEPS: Dict[ImportMethod, int] = {
    ImportMethod.EMAIL: 8,
    ImportMethod.ACCOUNT_LINK: 7,
    ImportMethod.MANUAL_ENTRY: 6,
    ImportMethod.DOCUMENT_SCAN: 5,
}

DEFAULT_TITLE = "Import Trip"

METHOD_TITLES: Dict[ImportMethod, str] = {
    ImportMethod.EMAIL: "Import via Email",
    ImportMethod.ACCOUNT_LINK: "Link Travel Account",
    ImportMethod.MANUAL_ENTRY: "Add Manually",
    ImportMethod.DOCUMENT_SCAN: "Scan Ticket",
}


def ordinal(step: StepId) -> int:
    """Return the 1-based position of a step within its pipeline."""
    return STEP_ORDINALS.get(step, 1)


def total_steps(method: Optional[ImportMethod]) -> int:
    """Return the length of a pipeline's longest path, 1 before a choice."""
    if method is None:
        return 1
    return TOTAL_STEPS[method]


def title(step: StepId, method: Optional[ImportMethod]) -> str:
    if step == StepId.METHOD_SELECTION or method is None:
        return DEFAULT_TITLE
    return METHOD_TITLES.get(method, DEFAULT_TITLE)
