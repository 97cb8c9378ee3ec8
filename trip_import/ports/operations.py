"""Step operation port - External work behind asynchronous steps.

Connecting to an email provider, scanning an inbox, linking a travel
account and fetching a booking are all long-running external calls.
This protocol is what the step runner awaits while such a step is
shown.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, Optional, Protocol

if TYPE_CHECKING:
    from ..domain.models import ImportMethod, StepId


class StepOperationPort(Protocol):
    """Port for the operation behind an asynchronous step.

    Implementation: adapters/operations/simulated.py (SimulatedStepOperation)

    Implementations must be cancellation-safe: when the wizard is closed
    or rewound, the awaiting task is cancelled and the result discarded.
    Failures must be raised as StepOperationError.
    """

    async def run(
        self,
        step: StepId,
        method: Optional[ImportMethod],
        data: Mapping[str, Any],
    ) -> Mapping[str, Any]:
        """Perform the operation for a step.

        Args:
            step: The asynchronous step being shown.
            method: The active import method.
            data: Read-only view of the payload collected so far.

        Returns:
            Data to merge into the flow payload (may be empty).

        Raises:
            StepOperationError: If the operation fails.
        """
        ...
