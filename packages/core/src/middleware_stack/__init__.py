"""middleware-stack — ordered middleware registry folded into a call chain.

Zero runtime dependencies. Optional prometheus-client and opentelemetry
for the observability subscribers.
"""

from __future__ import annotations

from .instrumentation import (
    InstrumentationEvent,
    Notifier,
    Subscriber,
    Subscription,
    get_notifier,
    set_notifier,
)
from .middleware import (
    EVENT_NAME,
    InstrumentationProxy,
    MiddlewareDefinition,
    MiddlewareStack,
    build_chain,
)
from .ports import IMiddleware, IMiddlewareFactory, INotifier
from .primitives import (
    FrozenStackError,
    MiddlewareStackError,
    UnknownMiddlewareError,
)

__all__ = [
    "EVENT_NAME",
    "FrozenStackError",
    "IMiddleware",
    "IMiddlewareFactory",
    "INotifier",
    "InstrumentationEvent",
    "InstrumentationProxy",
    "MiddlewareDefinition",
    "MiddlewareStack",
    "MiddlewareStackError",
    "Notifier",
    "Subscriber",
    "Subscription",
    "UnknownMiddlewareError",
    "build_chain",
    "get_notifier",
    "set_notifier",
]
