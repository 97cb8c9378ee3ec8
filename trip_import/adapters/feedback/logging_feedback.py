"""Logging feedback implementation.

Stands in for the device haptics engine: every impulse is logged and
kept in order, which also makes the feedback side effect observable
in tests.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import List

from ...domain.models import FeedbackStyle


@dataclass
class LoggingFeedback:
    """Feedback adapter that logs and records each impulse.

    Attributes:
        impulses: Styles of the impulses fired so far, oldest first
    """

    impulses: List[FeedbackStyle] = field(default_factory=list)

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def impact(self, style: FeedbackStyle) -> None:
        with self._lock:
            self.impulses.append(style)
        self._logger.debug("Haptic impact", extra={"style": style.value})

    def clear(self) -> int:
        """Forget recorded impulses.

        Returns:
            Number of impulses that were cleared.
        """
        with self._lock:
            count = len(self.impulses)
            self.impulses.clear()
            return count
