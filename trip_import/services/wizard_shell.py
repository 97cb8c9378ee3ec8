"""Presentation shell of the import wizard.

The shell owns the wizard's visibility. It resolves the current step to
a step handler, hands that handler the accumulated data and the
navigation callbacks, and turns a close into a controller reset once
the dismissal delay has elapsed.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..domain.models import FeedbackStyle, FlowData, FlowView, StepId
from .flow_controller import ImportFlowController
from .step_runner import AsyncStepRunner


@dataclass(frozen=True)
class StepContext:
    """What a step handler receives.

    Attributes:
        step: The step being rendered
        data: Read-only payload collected so far, for pre-filling fields
        advance: Move forward, optionally with data and a method choice
        rewind: Move back
    """

    step: StepId
    data: Mapping[str, Any]
    advance: Callable[..., bool]
    rewind: Callable[[], bool]


StepHandler = Callable[[StepContext], Any]


@dataclass
class StepHandlerRegistry:
    """Maps steps to the handlers that render them.

    Steps without a handler fall back to the method selection handler.
    """

    handlers: Dict[StepId, StepHandler] = field(default_factory=dict)

    def register(self, step: StepId, handler: StepHandler) -> None:
        self.handlers[step] = handler

    def handler(self, *steps: StepId) -> Callable[[StepHandler], StepHandler]:
        """Decorator registering a handler for one or more steps."""

        def decorator(fn: StepHandler) -> StepHandler:
            for step in steps:
                self.register(step, fn)
            return fn

        return decorator

    def resolve(self, step: StepId) -> StepHandler:
        """Return the handler for a step.

        Raises:
            KeyError: If neither the step nor method selection has a handler.
        """
        if step in self.handlers:
            return self.handlers[step]
        if StepId.METHOD_SELECTION in self.handlers:
            logging.getLogger(__name__).warning(
                "No handler for step, falling back to method selection",
                extra={"step": step.value},
            )
            return self.handlers[StepId.METHOD_SELECTION]
        raise KeyError(f"No handler registered for step: {step.value}")

    def missing(self) -> List[StepId]:
        """Return the steps that have no dedicated handler."""
        return [step for step in StepId if step not in self.handlers]


@dataclass(frozen=True)
class RenderedStep:
    """Result of rendering the current step.

    Attributes:
        view: Snapshot the step was rendered from
        output: Whatever the step handler returned
    """

    view: FlowView
    output: Any


@dataclass
class ImportWizard:
    """Presentation shell around one flow controller.

    The shell takes over the controller's close callback, so that back
    navigation from the first step dismisses the wizard. When
    ``close_on_complete`` is set, the wizard is dismissed right after the
    completion callback has received the payload.

    Attributes:
        controller: Controller driving the steps
        handlers: Step handlers to render with
        runner: Runner for asynchronous steps, if any
        reset_delay_seconds: Delay between a close and the state reset
        on_close: Called whenever the wizard is dismissed
        close_on_complete: Dismiss the wizard after completion
    """

    controller: ImportFlowController
    handlers: StepHandlerRegistry
    runner: Optional[AsyncStepRunner] = None
    reset_delay_seconds: float = 0.3
    on_close: Optional[Callable[[], None]] = None
    close_on_complete: bool = True

    _pending_reset: Optional[asyncio.TimerHandle] = field(default=None, init=False, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        self.controller.on_close = self._dismiss

        if self.close_on_complete:
            consumer = self.controller.on_complete

            def complete_and_close(data: FlowData) -> None:
                consumer(data)
                self._dismiss()

            self.controller.on_complete = complete_and_close

    @property
    def visible(self) -> bool:
        return self.controller.is_open

    def open(self) -> FlowView:
        """Present the wizard with a fresh traversal."""
        if self._pending_reset is not None:
            self._pending_reset.cancel()
            self._pending_reset = None
        self.controller.open()
        self._logger.info("Import wizard opened")
        return self.controller.view()

    def close(self) -> None:
        """Dismiss the wizard on user request (close button, backdrop)."""
        if not self.controller.is_open:
            return
        self.controller.feedback.impact(FeedbackStyle.LIGHT)
        self._dismiss()

    def render(self) -> RenderedStep:
        """Render the current step with its handler."""
        view = self.controller.view()
        handler = self.handlers.resolve(view.current_step)
        context = StepContext(
            step=view.current_step,
            data=view.data,
            advance=self.controller.advance,
            rewind=self.controller.rewind,
        )
        return RenderedStep(view=view, output=handler(context))

    def _dismiss(self) -> None:
        if not self.controller.close():
            return
        if self.runner is not None:
            self.runner.cancel()
        if self.on_close is not None:
            self.on_close()
        self._schedule_reset()

    def _schedule_reset(self) -> None:
        if self.reset_delay_seconds <= 0:
            self.controller.reset()
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.controller.reset()
            return
        self._pending_reset = loop.call_later(self.reset_delay_seconds, self._reset_after_close)

    def _reset_after_close(self) -> None:
        self._pending_reset = None
        if not self.controller.is_open:
            self.controller.reset()
            self._logger.debug("Flow state reset after close")
