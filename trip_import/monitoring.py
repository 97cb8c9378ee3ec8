"""Logging setup for the import flow.

Modules log through ``logging.getLogger(__name__)`` and attach their
context as ``extra={...}`` fields. This module applies the observability
configuration once at startup; with ``structured=True`` every record is
emitted as a single JSON object that includes those extra fields.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from .config import ObservabilityConfig, get_config

logger = logging.getLogger("trip_import")

# Attributes every LogRecord carries; anything else came from ``extra``.
_RESERVED = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render records as JSON, keeping ``extra`` fields as top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": self.formatTime(record),
            "logger": record.name,
            "level": record.levelname,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RESERVED and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(config: Optional[ObservabilityConfig] = None) -> logging.Logger:
    """Configure the ``trip_import`` logger hierarchy.

    Calling this again replaces the handler installed by the previous call.

    Args:
        config: Observability settings (defaults to the global config).

    Returns:
        The configured package logger.
    """
    config = config or get_config().observability

    for handler in list(logger.handlers):
        if getattr(handler, "_trip_import", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler._trip_import = True  # type: ignore[attr-defined]
    if config.structured:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(config.format))

    logger.addHandler(handler)
    logger.setLevel(config.level.upper())
    logger.debug(
        "Logging configured",
        extra={"level": config.level, "structured": config.structured},
    )
    return logger
