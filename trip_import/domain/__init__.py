"""Domain layer - Core models and errors of the trip import flow.

This module contains the step and method enumerations, the flow state
and its read-only views, and the typed errors used throughout the
application. No external dependencies.
"""

from .errors import (
    ConfigurationError,
    InvalidTransitionError,
    MethodRequiredError,
    StepOperationError,
    TripImportError,
)
from .models import (
    EMAIL_PROVIDER_KEY,
    MANUAL_TYPE_KEY,
    OTHER_EMAIL_PROVIDER,
    FeedbackStyle,
    FlowData,
    FlowState,
    FlowView,
    ImportMethod,
    StepFailure,
    StepId,
)

__all__ = [
    # Models
    "FlowData",
    "FlowState",
    "FlowView",
    "FeedbackStyle",
    "ImportMethod",
    "StepFailure",
    "StepId",
    "EMAIL_PROVIDER_KEY",
    "MANUAL_TYPE_KEY",
    "OTHER_EMAIL_PROVIDER",
    # Errors
    "TripImportError",
    "InvalidTransitionError",
    "MethodRequiredError",
    "StepOperationError",
    "ConfigurationError",
]
