"""Top-level package for the trip import wizard.

This package exposes the controller that drives the multi-method trip
import flow (email, account link, manual entry, document scan): the
step graph it interprets, the metadata used for progress display, the
runner for steps that wait on external operations, and the shell that
resolves steps to their handlers.
"""

from .domain import FlowState, FlowView, ImportMethod, StepId
from .services import (
    AsyncStepRunner,
    ImportFlowController,
    ImportWizard,
    ImportWizardFactory,
    StepHandlerRegistry,
)

__all__ = [
    "AsyncStepRunner",
    "FlowState",
    "FlowView",
    "ImportFlowController",
    "ImportMethod",
    "ImportWizard",
    "ImportWizardFactory",
    "StepHandlerRegistry",
    "StepId",
]
