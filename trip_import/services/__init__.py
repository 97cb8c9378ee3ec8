"""Services layer - Application orchestration.

This module contains the services that drive the import wizard on top
of the step graph and the ports.

Available services:
- ImportFlowController: State machine of one wizard traversal
- AsyncStepRunner: Cancellable operations of the asynchronous steps
- ImportWizard: Presentation shell resolving steps to handlers
- ImportWizardFactory: Builds independent, fully wired wizards
"""

from .factory import ImportWizardFactory
from .flow_controller import ImportFlowController
from .step_runner import AsyncStepRunner
from .wizard_shell import (
    ImportWizard,
    RenderedStep,
    StepContext,
    StepHandler,
    StepHandlerRegistry,
)

__all__ = [
    "ImportFlowController",
    "AsyncStepRunner",
    "ImportWizard",
    "ImportWizardFactory",
    "RenderedStep",
    "StepContext",
    "StepHandler",
    "StepHandlerRegistry",
]
