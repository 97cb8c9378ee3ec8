"""Wizard factory - Builds a fully wired wizard per import.

Each call produces an independent controller, step runner and shell,
so concurrent flows never share state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from ..config import FlowConfig
from ..domain.errors import ConfigurationError
from ..domain.models import FlowData, StepId
from ..ports.feedback import FeedbackPort
from ..ports.operations import StepOperationPort
from .flow_controller import ImportFlowController
from .step_runner import AsyncStepRunner
from .wizard_shell import ImportWizard, StepHandlerRegistry


@dataclass
class ImportWizardFactory:
    """Creates import wizards sharing the same collaborators.

    Attributes:
        feedback: Tactile feedback adapter
        operation: Operation behind the asynchronous steps
        config: Flow configuration
    """

    feedback: FeedbackPort
    operation: StepOperationPort
    config: FlowConfig

    def create(
        self,
        on_complete: Callable[[FlowData], None],
        handlers: StepHandlerRegistry,
        on_close: Optional[Callable[[], None]] = None,
    ) -> ImportWizard:
        """Build a closed wizard; call ``open()`` to present it.

        Args:
            on_complete: Receives the payload of a finished traversal.
            handlers: Step handlers to render with.
            on_close: Called whenever the wizard is dismissed.

        Returns:
            A new ImportWizard with its own controller and runner.

        Raises:
            ConfigurationError: If no handler renders method selection,
                which every unhandled step falls back to.
        """
        if StepId.METHOD_SELECTION not in handlers.handlers:
            raise ConfigurationError(
                "A handler for method selection is required",
                setting_name="handlers",
                expected_type=StepId.METHOD_SELECTION.value,
            )

        controller = ImportFlowController(
            on_complete=on_complete,
            feedback=self.feedback,
        )
        runner = AsyncStepRunner(
            controller=controller,
            operation=self.operation,
            timeout_seconds=self.config.operation_timeout_seconds,
        )
        return ImportWizard(
            controller=controller,
            handlers=handlers,
            runner=runner,
            reset_delay_seconds=self.config.reset_delay_seconds,
            on_close=on_close,
        )
