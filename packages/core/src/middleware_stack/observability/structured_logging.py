"""StructuredLoggingSubscriber — JSON log entry per middleware call."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..instrumentation import InstrumentationEvent

_log = logging.getLogger(__name__)


class StructuredLoggingSubscriber:
    """Emits JSON log entries with event, middleware, outcome, duration."""

    def __init__(
        self, logger: logging.Logger | None = None, level: int = logging.INFO
    ) -> None:
        self._log = logger or _log
        self._level = level

    def __call__(self, event: InstrumentationEvent) -> None:
        if not self._log.isEnabledFor(self._level):
            return
        entry = {
            "event": event.name,
            "middleware": event.payload.get("middleware"),
            "outcome": event.outcome,
            "duration_ms": round(event.duration_ms, 2),
        }
        if event.exception is not None:
            entry["error"] = type(event.exception).__name__
        self._log.log(self._level, json.dumps(entry))
