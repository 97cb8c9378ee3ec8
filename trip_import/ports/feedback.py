"""Feedback port - Tactile feedback on wizard interactions.

Every forward, backward and close interaction is preceded by a light
haptic impulse. The controller only notifies this port; what the
device does with it is an adapter concern.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..domain.models import FeedbackStyle


class FeedbackPort(Protocol):
    """Port for tactile feedback.

    Implementations:
    - adapters/feedback/null_feedback.py (NullFeedback) - Disabled haptics
    - adapters/feedback/logging_feedback.py (LoggingFeedback) - Records impulses
    """

    def impact(self, style: FeedbackStyle) -> None:
        """Fire a single tactile impulse.

        Args:
            style: Intensity of the impulse.
        """
        ...
