"""Flow controller - State machine of the import wizard.

The controller is a thin interpreter over the step graph: it merges
submitted data, asks the graph for the next step, keeps the history
stack for back navigation, and fires the completion callback when a
terminal step is advanced.

Every change bumps an activation counter. Callers that act on behalf of
a specific step activation (the asynchronous step runner) pass it back,
so a late callback for a step that is no longer shown is dropped.
"""

from __future__ import annotations

import copy
import logging
import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, List, Mapping, Optional, Union

from ..adapters.feedback.null_feedback import NullFeedback
from ..domain.errors import InvalidTransitionError
from ..domain.models import (
    FeedbackStyle,
    FlowData,
    FlowState,
    FlowView,
    ImportMethod,
    StepFailure,
    StepId,
)
from ..graph import metadata
from ..graph.step_graph import (
    error_step_for,
    is_async_step,
    is_error_step,
    is_terminal,
    next_step,
    retry_step,
)
from ..ports.feedback import FeedbackPort

CompletionCallback = Callable[[FlowData], None]
CloseCallback = Callable[[], None]
ViewListener = Callable[[FlowView], None]


@dataclass
class ImportFlowController:
    """State machine driving one import wizard.

    A controller is created closed; ``open()`` starts a fresh traversal.
    Each wizard instance owns its own controller, so several flows can
    coexist without sharing state.

    Attributes:
        on_complete: Called once with the accumulated payload when a
            terminal step is advanced
        on_close: Called when back navigation leaves the wizard
        feedback: Tactile feedback fired on user interactions
    """

    on_complete: CompletionCallback
    on_close: Optional[CloseCallback] = None
    feedback: FeedbackPort = field(default_factory=NullFeedback)

    _state: FlowState = field(default_factory=FlowState.initial, init=False, repr=False)
    _activation: int = field(default=0, init=False, repr=False)
    _is_open: bool = field(default=False, init=False, repr=False)
    _completed: bool = field(default=False, init=False, repr=False)
    _listeners: List[ViewListener] = field(default_factory=list, init=False, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def state(self) -> FlowState:
        """Copy of the current flow state."""
        with self._lock:
            s = self._state
            return FlowState(
                current_step=s.current_step,
                history=list(s.history),
                method=s.method,
                data=copy.deepcopy(s.data),
                failure=s.failure,
            )

    @property
    def current_step(self) -> StepId:
        return self._state.current_step

    @property
    def method(self) -> Optional[ImportMethod]:
        return self._state.method

    @property
    def history(self) -> tuple[StepId, ...]:
        return tuple(self._state.history)

    @property
    def data(self) -> Mapping[str, Any]:
        """Read-only snapshot of the accumulated payload.

        Nested values are copies; mutating them never reaches the flow.
        """
        with self._lock:
            return MappingProxyType(copy.deepcopy(self._state.data))

    @property
    def activation(self) -> int:
        return self._activation

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def is_complete(self) -> bool:
        return self._completed

    def view(self) -> FlowView:
        """Build the snapshot the presentation shell renders from."""
        with self._lock:
            s = self._state
            return FlowView(
                current_step=s.current_step,
                method=s.method,
                ordinal=metadata.ordinal(s.current_step),
                total_steps=metadata.total_steps(s.method),
                title=metadata.title(s.current_step, s.method),
                can_rewind=bool(s.history),
                is_open=self._is_open,
                activation=self._activation,
                data=MappingProxyType(copy.deepcopy(s.data)),
                failure=s.failure,
            )

    def add_listener(self, listener: ViewListener) -> None:
        """Call ``listener`` with a fresh view after every state change."""
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: ViewListener) -> bool:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)
                return True
            return False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self) -> None:
        """Present the wizard with a fresh traversal."""
        with self._lock:
            self._is_open = True
            self._replace_state("open")

    def close(self) -> bool:
        """Mark the wizard dismissed.

        Pending asynchronous work is invalidated immediately. The state
        itself is kept until ``reset()``, which the shell calls once the
        dismissal animation has finished.

        Returns:
            False if the wizard was already closed.
        """
        with self._lock:
            if not self._is_open:
                return False
            self._is_open = False
            self._logger.info(
                "Import flow closed",
                extra={
                    "step": self._state.current_step.value,
                    "completed": self._completed,
                },
            )
            self._changed()
            return True

    def reset(self) -> None:
        """Discard the traversal and start over at method selection."""
        with self._lock:
            self._replace_state("reset")

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def advance(
        self,
        partial_data: Optional[Mapping[str, Any]] = None,
        method: Optional[Union[ImportMethod, str]] = None,
        *,
        activation: Optional[int] = None,
    ) -> bool:
        """Move forward from the current step.

        Args:
            partial_data: Data submitted by the current step, copied and
                shallow merged into the payload (later keys win).
            method: Import method chosen at method selection.
            activation: Activation the caller acts for; the call is
                dropped when it no longer matches.

        Returns:
            True if the call was honored.

        Raises:
            InvalidTransitionError: If a method is given anywhere but at
                method selection, or the step graph rejects the transition.
        """
        with self._lock:
            if not self._accepts("advance", activation):
                return False
            if self._completed:
                self._logger.warning(
                    "Advance after completion ignored",
                    extra={"step": self._state.current_step.value},
                )
                return False

            self.feedback.impact(FeedbackStyle.LIGHT)

            state = self._state
            current = state.current_step
            chosen = state.method
            if method is not None:
                if current != StepId.METHOD_SELECTION:
                    raise InvalidTransitionError(
                        f"A method can only be chosen at {StepId.METHOD_SELECTION.value}",
                        step=current.value,
                        method=state.method.value if state.method else None,
                    )
                chosen = ImportMethod(method)

            merged = dict(state.data)
            if partial_data:
                merged.update(copy.deepcopy(dict(partial_data)))

            if is_terminal(current):
                state.method = chosen
                state.data = merged
                self._completed = True
                self._logger.info(
                    "Import flow completed",
                    extra={
                        "method": chosen.value if chosen else None,
                        "fields": sorted(merged),
                    },
                )
                self.on_complete(copy.deepcopy(merged))
                return True

            if is_error_step(current):
                failed = state.failure.step if state.failure else None
                target = retry_step(current, failed)
                state.data = merged
                if target in state.history:
                    del state.history[state.history.index(target):]
                state.current_step = target
                state.failure = None
                self._logger.info(
                    "Retrying step",
                    extra={"from_step": current.value, "to_step": target.value},
                )
                self._changed()
                return True

            target = next_step(current, chosen, merged)
            state.method = chosen
            state.data = merged
            state.history.append(current)
            state.current_step = target
            self._logger.info(
                "Step advanced",
                extra={
                    "from_step": current.value,
                    "to_step": target.value,
                    "method": chosen.value if chosen else None,
                },
            )
            self._changed()
            return True

    def rewind(self) -> bool:
        """Move back to the previously shown step.

        Data entered on abandoned steps is kept. With an empty history the
        wizard asks to be closed instead of changing state.

        Returns:
            True if a step was popped, False if a close was requested,
            the wizard is closed or the traversal has completed.
        """
        with self._lock:
            if not self._accepts("rewind", None):
                return False
            if self._completed:
                self._logger.warning(
                    "Rewind after completion ignored",
                    extra={"step": self._state.current_step.value},
                )
                return False

            self.feedback.impact(FeedbackStyle.LIGHT)

            state = self._state
            if not state.history:
                self._logger.debug("Rewind on first step, requesting close")
                if self.on_close is not None:
                    self.on_close()
                return False

            left = state.current_step
            state.current_step = state.history.pop()
            state.failure = None
            self._logger.info(
                "Step rewound",
                extra={"from_step": left.value, "to_step": state.current_step.value},
            )
            self._changed()
            return True

    def fail(
        self,
        message: str,
        *,
        timed_out: bool = False,
        activation: Optional[int] = None,
    ) -> bool:
        """Move from a failed asynchronous step to its pipeline's error step.

        The failed step is not pushed onto the history: back navigation
        from the error step returns to the step before it, while advancing
        retries it.

        Args:
            message: Human-readable failure description.
            timed_out: Whether the operation timed out.
            activation: Activation the caller acts for.

        Returns:
            True if the failure was recorded.

        Raises:
            InvalidTransitionError: If the current step is not asynchronous.
        """
        with self._lock:
            if not self._accepts("fail", activation):
                return False

            state = self._state
            current = state.current_step
            if not is_async_step(current) or state.method is None:
                raise InvalidTransitionError(
                    f"Step {current.value} cannot fail",
                    step=current.value,
                    method=state.method.value if state.method else None,
                )

            state.failure = StepFailure(step=current, message=message, timed_out=timed_out)
            state.current_step = error_step_for(state.method)
            self._logger.warning(
                "Step failed",
                extra={
                    "step": current.value,
                    "error": message,
                    "timed_out": timed_out,
                },
            )
            self._changed()
            return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _accepts(self, operation: str, activation: Optional[int]) -> bool:
        if not self._is_open:
            self._logger.debug(
                "Ignoring call on closed flow",
                extra={"operation": operation},
            )
            return False
        if activation is not None and activation != self._activation:
            self._logger.debug(
                "Ignoring stale call",
                extra={
                    "operation": operation,
                    "activation": activation,
                    "current_activation": self._activation,
                },
            )
            return False
        return True

    def _replace_state(self, reason: str) -> None:
        self._state = FlowState.initial()
        self._completed = False
        self._logger.debug("Flow state replaced", extra={"reason": reason})
        self._changed()

    def _changed(self) -> None:
        self._activation += 1
        view = self.view()
        for listener in list(self._listeners):
            listener(view)
