"""Asynchronous step runner.

Steps such as ``email-connecting`` or ``manual-fetching`` wait on an
external operation and then advance on their own. The runner watches
the flow controller and, whenever such a step becomes current, starts
one task awaiting the StepOperationPort. The task is bound to the step
activation that started it:

- any change of step, a close or a reset cancels it
- its result is handed back with that activation, so a callback that
  fires after cancellation is dropped by the controller
- any exception other than cancellation moves the flow to the error step
- at most one task is ever in flight
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

from ..domain.errors import StepOperationError
from ..domain.models import FlowView
from ..graph.step_graph import is_async_step
from ..ports.operations import StepOperationPort
from .flow_controller import ImportFlowController


@dataclass
class AsyncStepRunner:
    """Runs the operation of the current asynchronous step.

    Attributes:
        controller: Controller whose steps are watched
        operation: Operation awaited for each asynchronous step
        timeout_seconds: Per-operation timeout (None = no timeout)
    """

    controller: ImportFlowController
    operation: StepOperationPort
    timeout_seconds: Optional[float] = None

    _task: Optional[asyncio.Task[None]] = field(default=None, init=False, repr=False)
    _task_activation: Optional[int] = field(default=None, init=False, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        self.controller.add_listener(self._on_change)

    @property
    def pending(self) -> bool:
        """Whether an operation is currently in flight."""
        return self._task is not None and not self._task.done()

    def sync(self) -> bool:
        """Start the operation of the current step if one is due.

        Called automatically on every controller change; call it again
        from inside a running event loop when the step was entered from
        synchronous code.

        Returns:
            True if an operation is in flight afterwards.
        """
        self._on_change(self.controller.view())
        return self.pending

    def cancel(self) -> bool:
        """Cancel the operation in flight, if any.

        Returns:
            True if a running task was cancelled.
        """
        task, self._task = self._task, None
        activation, self._task_activation = self._task_activation, None
        if task is None or task.done():
            return False
        task.cancel()
        self._logger.info(
            "Step operation cancelled",
            extra={"activation": activation},
        )
        return True

    async def wait(self) -> None:
        """Wait until no operation is in flight.

        Chained asynchronous steps are followed: when one operation
        advances into another asynchronous step, the new operation is
        awaited too.
        """
        while self._task is not None:
            task = self._task
            await asyncio.wait({task})
            if self._task is task:
                self._task = None
                self._task_activation = None

    def close(self) -> None:
        """Stop watching the controller and cancel pending work."""
        self.controller.remove_listener(self._on_change)
        self.cancel()

    def _on_change(self, view: FlowView) -> None:
        if self._task is not None and self._task_activation != view.activation:
            self.cancel()

        if not view.is_open or not is_async_step(view.current_step):
            return
        if self._task is not None:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._logger.warning(
                "No running event loop, step operation deferred",
                extra={"step": view.current_step.value},
            )
            return

        self._task_activation = view.activation
        self._task = loop.create_task(self._run(view))
        self._task.add_done_callback(self._on_done)
        self._logger.debug(
            "Step operation started",
            extra={"step": view.current_step.value, "activation": view.activation},
        )

    async def _run(self, view: FlowView) -> None:
        step = view.current_step
        call = self.operation.run(step, view.method, view.data)
        try:
            if self.timeout_seconds is not None:
                result = await asyncio.wait_for(call, self.timeout_seconds)
            else:
                result = await call
        except (asyncio.TimeoutError, TimeoutError):
            self._detach()
            self.controller.fail(
                f"{step.value} timed out after {self.timeout_seconds}s",
                timed_out=True,
                activation=view.activation,
            )
            return
        except StepOperationError as e:
            self._detach()
            self.controller.fail(e.message, timed_out=e.timed_out, activation=view.activation)
            return
        except Exception as e:
            self._logger.error(
                "Step operation raised",
                extra={"step": step.value, "error": repr(e)},
                exc_info=e,
            )
            self._detach()
            self.controller.fail(str(e) or type(e).__name__, activation=view.activation)
            return

        self._detach()
        self.controller.advance(result, activation=view.activation)

    def _detach(self) -> None:
        # The finishing task hands control back to the controller; it must
        # not be cancelled by the change notification that follows.
        if self._task is asyncio.current_task():
            self._task = None
            self._task_activation = None

    def _on_done(self, task: asyncio.Task[None]) -> None:
        if self._task is task:
            self._task = None
            self._task_activation = None
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._logger.error(
                "Step operation crashed",
                extra={"error": repr(exc)},
                exc_info=exc,
            )
