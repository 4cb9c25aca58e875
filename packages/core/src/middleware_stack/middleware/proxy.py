"""InstrumentationProxy — reports each middleware call to the notifier."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..ports.handler import IMiddleware

if TYPE_CHECKING:
    from ..ports.notifier import INotifier

EVENT_NAME = "process_middleware.middleware_stack"


class InstrumentationProxy(IMiddleware):
    """Wraps one live middleware and instruments every call to it.

    Only built when the notifier had a listener for :data:`EVENT_NAME` at
    build time, so each call always emits exactly one event.
    """

    def __init__(
        self,
        middleware: IMiddleware,
        middleware_name: str,
        notifier: INotifier,
    ) -> None:
        self.middleware = middleware
        self._notifier = notifier
        self._payload = {"middleware": middleware_name}

    def __call__(self, request: Any) -> Any:
        return self._notifier.instrument(
            EVENT_NAME, dict(self._payload), lambda: self.middleware(request)
        )

    def __repr__(self) -> str:
        return f"InstrumentationProxy({self._payload['middleware']})"
