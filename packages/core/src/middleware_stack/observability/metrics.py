"""MetricsSubscriber — Prometheus counters/histograms (optional [prometheus] extra).

Emits ``middleware_stack_duration_seconds`` and
``middleware_stack_invocations_total`` with labels ``{middleware, outcome}``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..instrumentation import InstrumentationEvent

_logger = logging.getLogger(__name__)


class MetricsSubscriber:
    """Records duration and outcome per middleware layer.

    Prometheus metrics:
      - ``middleware_stack_duration_seconds{middleware, outcome}``
      - ``middleware_stack_invocations_total{middleware, outcome}``

    Does nothing when ``prometheus_client`` is not installed. Pass a fresh
    *registry* to keep metrics out of the process-wide default one.
    """

    def __init__(self, registry: Any | None = None) -> None:
        self._histogram = None
        self._counter = None
        try:
            from prometheus_client import REGISTRY, Counter, Histogram

            target = registry if registry is not None else REGISTRY
            self._histogram = Histogram(
                "middleware_stack_duration_seconds",
                "Middleware layer duration",
                ["middleware", "outcome"],
                registry=target,
            )
            self._counter = Counter(
                "middleware_stack_invocations",
                "Middleware layer invocations",
                ["middleware", "outcome"],
                registry=target,
            )
        except ImportError:
            _logger.debug("prometheus_client not installed, metrics disabled")

    @property
    def enabled(self) -> bool:
        return self._histogram is not None and self._counter is not None

    def __call__(self, event: InstrumentationEvent) -> None:
        if self._histogram is None or self._counter is None:
            return
        labels = {
            "middleware": str(event.payload.get("middleware", "unknown")),
            "outcome": event.outcome,
        }
        self._histogram.labels(**labels).observe(event.duration)
        self._counter.labels(**labels).inc()
