"""Simulated step operations.

This adapter reproduces the fixed-delay timers of the connecting,
scanning and fetching screens as awaitable, cancellable operations:
- Per-step delays from TimingConfig
- Optional failure injection for exercising the error steps
- Proper logging, including cancellations

The delay is the only work performed; no data is produced beyond what
the user already entered.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from ...config import TimingConfig, get_config
from ...domain.errors import StepOperationError
from ...domain.models import ImportMethod, StepId
from ...graph.step_graph import is_async_step


@dataclass
class SimulatedStepOperation:
    """Step operation adapter that waits a configured delay.

    This adapter implements StepOperationPort.

    Attributes:
        config: Timing configuration (delays and failing steps)
        results: Optional per-step data returned on success

    Example:
        operation = SimulatedStepOperation(TimingConfig(scanning_seconds=0.1))
        data = await operation.run(StepId.EMAIL_SCANNING, ImportMethod.EMAIL, {})
    """

    config: TimingConfig = field(default_factory=lambda: get_config().timing)
    results: Dict[StepId, Mapping[str, Any]] = field(default_factory=dict)

    _calls: int = field(default=0, init=False, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    async def run(
        self,
        step: StepId,
        method: Optional[ImportMethod],
        data: Mapping[str, Any],
    ) -> Mapping[str, Any]:
        """Wait for the step's delay, then succeed or fail.

        Args:
            step: The asynchronous step being shown.
            method: The active import method.
            data: Payload collected so far (unused).

        Returns:
            The configured result for the step, empty by default.

        Raises:
            StepOperationError: If the step is not asynchronous or is
                configured to fail.
        """
        if not is_async_step(step):
            raise StepOperationError(
                f"Step {step.value} has no operation",
                step=step.value,
            )

        self._calls += 1
        delay = self.config.delay_for(step)
        self._logger.debug(
            "Simulated operation started",
            extra={
                "step": step.value,
                "method": method.value if method else None,
                "delay_seconds": delay,
            },
        )

        try:
            await asyncio.sleep(delay)
        except asyncio.CancelledError:
            self._logger.debug(
                "Simulated operation cancelled",
                extra={"step": step.value},
            )
            raise

        if step in self.config.failing_steps:
            self._logger.info(
                "Simulated operation failed",
                extra={"step": step.value},
            )
            raise StepOperationError(
                f"Simulated failure while {step.value.split('-', 1)[1]}",
                step=step.value,
            )

        return dict(self.results.get(step, {}))

    @property
    def calls(self) -> int:
        """Number of operations started so far."""
        return self._calls
