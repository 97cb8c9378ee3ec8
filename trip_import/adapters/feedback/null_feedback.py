"""Null feedback implementation.

Used when haptics are disabled in configuration, and in tests that do
not care about tactile feedback.
"""

from __future__ import annotations

from dataclasses import dataclass

from ...domain.models import FeedbackStyle


@dataclass
class NullFeedback:
    """No-op feedback - never fires an impulse."""

    name: str = "null"

    def impact(self, style: FeedbackStyle) -> None:
        pass
