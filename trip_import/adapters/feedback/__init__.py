"""Feedback adapters - Implementations of FeedbackPort.

Available implementations:
- NullFeedback: Haptics disabled
- LoggingFeedback: Logs and records every impulse
"""

from .logging_feedback import LoggingFeedback
from .null_feedback import NullFeedback

__all__ = ["LoggingFeedback", "NullFeedback"]
