"""Observability — subscribers for instrumented middleware calls."""

from __future__ import annotations

import logging as _logging
from typing import TYPE_CHECKING

from ..instrumentation import get_notifier
from ..middleware.proxy import EVENT_NAME
from .metrics import MetricsSubscriber
from .structured_logging import StructuredLoggingSubscriber
from .tracing import TracingSubscriber

if TYPE_CHECKING:
    from ..instrumentation import Notifier, Subscriber, Subscription

_logger = _logging.getLogger(__name__)


def install_observability(
    notifier: Notifier | None = None,
    *,
    logging: bool = True,
    metrics: bool = False,
    tracing: bool = False,
    pattern: str = EVENT_NAME,
    priority: int = -100,
) -> list[Subscription]:
    """Subscribe the selected subscribers to middleware events.

    Uses the context notifier when *notifier* is omitted. Subscribing must
    happen before ``MiddlewareStack.build`` for the chain to be instrumented.
    """
    target = notifier if notifier is not None else get_notifier()
    subscribers: list[Subscriber] = []
    if logging:
        subscribers.append(StructuredLoggingSubscriber())
    if metrics:
        subscribers.append(MetricsSubscriber())
    if tracing:
        subscribers.append(TracingSubscriber())
    subscriptions = [
        target.subscribe(s, pattern=pattern, priority=priority) for s in subscribers
    ]
    _logger.info("Observability subscribers installed (%d)", len(subscriptions))
    return subscriptions


__all__ = [
    "MetricsSubscriber",
    "StructuredLoggingSubscriber",
    "TracingSubscriber",
    "install_observability",
]
