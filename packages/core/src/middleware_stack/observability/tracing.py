"""TracingSubscriber — OpenTelemetry span per middleware call (optional [tracing] extra)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..instrumentation import InstrumentationEvent

logger = logging.getLogger(__name__)

_NS_PER_SECOND = 1_000_000_000


class TracingSubscriber:
    """Records each event as a span using its measured start and end times.

    Events are published after the call returns, so spans are created
    retroactively rather than around the call. Does nothing when
    ``opentelemetry-api`` is not installed.
    """

    def __init__(
        self,
        tracer_provider: Any | None = None,
        tracer_name: str = "middleware-stack",
    ) -> None:
        self._tracer = None
        self._status_cls: Any = None
        self._status_code: Any = None
        try:
            from opentelemetry import trace
            from opentelemetry.trace import Status, StatusCode

            self._tracer = trace.get_tracer(
                tracer_name, tracer_provider=tracer_provider
            )
            self._status_cls = Status
            self._status_code = StatusCode
        except ImportError:
            logger.debug("opentelemetry not installed, tracing disabled")

    @property
    def enabled(self) -> bool:
        return self._tracer is not None

    def __call__(self, event: InstrumentationEvent) -> None:
        if self._tracer is None:
            return
        middleware = str(event.payload.get("middleware", "unknown"))
        span = self._tracer.start_span(
            f"middleware {middleware}",
            start_time=int(event.started_at * _NS_PER_SECOND),
            attributes={"middleware.name": middleware, "event.name": event.name},
        )
        span.set_attribute("outcome", event.outcome)
        if event.exception is not None:
            span.record_exception(event.exception)
            span.set_status(
                self._status_cls(self._status_code.ERROR, str(event.exception))
            )
        span.end(end_time=int(event.finished_at * _NS_PER_SECOND))
