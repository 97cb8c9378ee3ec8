"""Domain models for the trip import flow.

The flow state is the only mutable model: it is owned by the flow
controller and changed exclusively through advance, rewind, fail and
reset. Everything handed outside the controller (views, failures) is a
frozen dataclass.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

FlowData = Dict[str, Any]

# FlowData keys read by the step graph branch points.
EMAIL_PROVIDER_KEY = "email_provider"
MANUAL_TYPE_KEY = "manual_type"

OTHER_EMAIL_PROVIDER = "other"


class ImportMethod(str, Enum):
    """The four import pipelines a user can choose from."""

    EMAIL = "email"
    ACCOUNT_LINK = "account-link"
    MANUAL_ENTRY = "manual-entry"
    DOCUMENT_SCAN = "document-scan"


class StepId(str, Enum):
    """Every step of every pipeline.

    Each step belongs to exactly one pipeline except METHOD_SELECTION,
    the shared entry point.
    """

    METHOD_SELECTION = "method-selection"

    # Email
    EMAIL_LINK = "email-link"
    EMAIL_PROVIDER = "email-provider"
    EMAIL_INPUT = "email-input"
    EMAIL_CONNECTING = "email-connecting"
    EMAIL_SCANNING = "email-scanning"
    EMAIL_BOOKINGS = "email-bookings"
    EMAIL_SUCCESS = "email-success"
    EMAIL_ERROR = "email-error"

    # Account link
    LINK_PROVIDER = "link-provider"
    LINK_AUTH = "link-auth"
    LINK_CONNECTING = "link-connecting"
    LINK_FETCHING = "link-fetching"
    LINK_TRIPS = "link-trips"
    LINK_SUCCESS = "link-success"
    LINK_ERROR = "link-error"

    # Manual entry
    MANUAL_TYPE = "manual-type"
    MANUAL_FLIGHT = "manual-flight"
    MANUAL_HOTEL = "manual-hotel"
    MANUAL_CAR = "manual-car"
    MANUAL_FETCHING = "manual-fetching"
    MANUAL_RESULT = "manual-result"
    MANUAL_SUCCESS = "manual-success"
    MANUAL_ERROR = "manual-error"

    # Document scan
    SCAN_CAMERA = "scan-camera"
    SCAN_SCANNING = "scan-scanning"
    SCAN_RESULT = "scan-result"
    SCAN_SUCCESS = "scan-success"


class FeedbackStyle(str, Enum):
    """Intensity of the tactile feedback fired on user interactions.

    Every wizard interaction uses the light impulse.
    """

    LIGHT = "light"


@dataclass(frozen=True, slots=True)
class StepFailure:
    """Why an asynchronous step moved the flow into its error step.

    Attributes:
        step: The asynchronous step whose operation failed
        message: Human-readable failure description
        timed_out: Whether the operation exceeded its timeout
    """

    step: StepId
    message: str
    timed_out: bool = False


@dataclass
class FlowState:
    """Mutable record of one wizard traversal.

    Invariants:
        - current_step is never in history
        - method is None only at METHOD_SELECTION before any choice
        - data is only ever merged into, never cleared except by reset

    Attributes:
        current_step: Step currently shown
        history: Previously visited steps, most recent last
        method: Chosen import method, if any
        data: Payload accumulated across steps
        failure: Set while the flow sits on an error step
    """

    current_step: StepId = StepId.METHOD_SELECTION
    history: List[StepId] = field(default_factory=list)
    method: Optional[ImportMethod] = None
    data: FlowData = field(default_factory=dict)
    failure: Optional[StepFailure] = None

    @classmethod
    def initial(cls) -> FlowState:
        """Return the state a freshly opened wizard starts from."""
        return cls()


@dataclass(frozen=True, slots=True)
class FlowView:
    """Read-only snapshot of the flow, rebuilt after every change.

    This is everything the presentation shell reads on each render to
    choose the step handler to mount and the progress to display.

    Attributes:
        current_step: Step currently shown
        method: Chosen import method, if any
        ordinal: 1-based position of the step in its pipeline
        total_steps: Length of the longest path of the active pipeline
        title: Header title for the active pipeline
        can_rewind: Whether a back navigation stays inside the wizard
        is_open: Whether the wizard is currently presented
        activation: Counter identifying the current step activation
        data: Read-only copy of the accumulated payload
        failure: Failure that led to the current error step, if any
    """

    current_step: StepId
    method: Optional[ImportMethod]
    ordinal: int
    total_steps: int
    title: str
    can_rewind: bool
    is_open: bool
    activation: int
    data: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    failure: Optional[StepFailure] = None

    @property
    def show_progress(self) -> bool:
        """Progress is only shown once a pipeline has been chosen."""
        return self.method is not None

    @property
    def progress(self) -> float:
        """Fraction of the active pipeline completed (0.0 to 1.0)."""
        if self.total_steps <= 0:
            return 0.0
        return min(self.ordinal / self.total_steps, 1.0)
