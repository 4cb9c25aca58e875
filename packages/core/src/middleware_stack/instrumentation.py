"""In-process event notifier — subscriptions with pattern filtering."""

from __future__ import annotations

import fnmatch
import logging
import time
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MATCH_CACHE_MAX_SIZE = 2048


@dataclass(frozen=True)
class InstrumentationEvent:
    """A finished, timed occurrence of an instrumented block.

    ``started_at``/``finished_at`` are wall-clock epoch seconds; ``duration``
    is measured with a monotonic clock and is the one to use for timings.
    """

    name: str
    payload: dict[str, Any]
    started_at: float
    finished_at: float
    duration: float
    exception: BaseException | None = field(default=None)

    @property
    def duration_ms(self) -> float:
        return self.duration * 1000

    @property
    def outcome(self) -> str:
        return "success" if self.exception is None else "error"


@runtime_checkable
class Subscriber(Protocol):
    """Protocol for event subscribers (logging, metrics, tracing, ...)."""

    def __call__(self, event: InstrumentationEvent) -> None:
        """Consume a finished event."""
        ...


class Subscription:
    """A registered subscriber with pattern filtering and priority."""

    def __init__(
        self,
        subscriber: Subscriber,
        *,
        pattern: str = "*",
        priority: int = 0,
        enabled: bool = True,
    ) -> None:
        self.subscriber = subscriber
        self.pattern = pattern
        self.priority = priority
        self.enabled = enabled
        self._match_cache: dict[str, bool] = {}

    def matches(self, name: str) -> bool:
        """Check if this subscription listens for events named *name*."""
        if not self.enabled:
            return False
        if name in self._match_cache:
            return self._match_cache[name]
        matched = fnmatch.fnmatchcase(name, self.pattern)
        if len(self._match_cache) >= _MATCH_CACHE_MAX_SIZE:
            self._match_cache.clear()
        self._match_cache[name] = matched
        return matched

    def clear_cache(self) -> None:
        """Clear the match cache."""
        self._match_cache.clear()


class Notifier:
    """Default :class:`~middleware_stack.ports.INotifier` implementation.

    Subscribers are called synchronously, in ascending priority order, after
    the instrumented block finishes. A failing subscriber is logged and
    skipped; it never affects the instrumented call.
    """

    def __init__(self) -> None:
        self._subscriptions: list[Subscription] = []

    def subscribe(
        self,
        subscriber: Subscriber,
        *,
        pattern: str = "*",
        priority: int = 0,
        enabled: bool = True,
    ) -> Subscription:
        """Subscribe *subscriber* to every event whose name matches *pattern*."""
        subscription = Subscription(
            subscriber,
            pattern=pattern,
            priority=priority,
            enabled=enabled,
        )
        self._subscriptions.append(subscription)
        self._subscriptions.sort(key=lambda s: s.priority)
        logger.debug(
            "Subscribed %r to %r (priority=%d)", subscriber, pattern, priority
        )
        return subscription

    def unsubscribe(self, target: Subscription | Subscriber) -> None:
        """Remove a subscription, or every subscription of a subscriber."""
        self._subscriptions = [
            s
            for s in self._subscriptions
            if s is not target and s.subscriber is not target
        ]

    def is_subscribed(self, name: str) -> bool:
        return any(s.matches(name) for s in self._subscriptions)

    def instrument(
        self,
        name: str,
        payload: dict[str, Any],
        body: Callable[[], T],
    ) -> T:
        """Run *body* and publish one timed event to matching subscribers."""
        started_at = time.time()
        start = time.perf_counter()
        try:
            result = body()
        except BaseException as exc:
            self._finish(name, payload, started_at, start, exc)
            raise
        self._finish(name, payload, started_at, start, None)
        return result

    def publish(self, event: InstrumentationEvent) -> None:
        """Deliver an already finished event to matching subscribers."""
        for subscription in list(self._subscriptions):
            if not subscription.matches(event.name):
                continue
            try:
                subscription.subscriber(event)
            except Exception as exc:  # noqa: BLE001
                logger.warning(
                    "Subscriber %r failed for %s: %s",
                    subscription.subscriber,
                    event.name,
                    exc,
                    exc_info=exc,
                )

    def clear(self) -> None:
        """Remove all subscriptions and clear caches."""
        for subscription in self._subscriptions:
            subscription.clear_cache()
        self._subscriptions.clear()

    def clear_caches(self) -> None:
        """Clear all match caches without removing subscriptions."""
        for subscription in self._subscriptions:
            subscription.clear_cache()

    def _finish(
        self,
        name: str,
        payload: dict[str, Any],
        started_at: float,
        start: float,
        exception: BaseException | None,
    ) -> None:
        duration = time.perf_counter() - start
        self.publish(
            InstrumentationEvent(
                name=name,
                payload=payload,
                started_at=started_at,
                finished_at=started_at + duration,
                duration=duration,
                exception=exception,
            )
        )


_notifier_var: ContextVar[Notifier | None] = ContextVar("notifier", default=None)


def get_notifier() -> Notifier:
    """Get the notifier for the current context.

    Creates a fresh ``Notifier`` on first access within each context, so
    tests and threads never share subscriptions by accident.
    """
    notifier = _notifier_var.get()
    if notifier is None:
        notifier = Notifier()
        _notifier_var.set(notifier)
    return notifier


def set_notifier(notifier: Notifier) -> None:
    """Set a custom notifier in the current context."""
    _notifier_var.set(notifier)
