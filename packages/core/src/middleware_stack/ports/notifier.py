"""INotifier — observability collaborator queried by ``build``."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable

T = TypeVar("T")


@runtime_checkable
class INotifier(Protocol):
    """Protocol for the event notifier that instruments middleware calls."""

    def is_subscribed(self, name: str) -> bool:
        """Return whether anything currently listens for events named *name*."""
        ...

    def instrument(
        self,
        name: str,
        payload: dict[str, Any],
        body: Callable[[], T],
    ) -> T:
        """Run *body*, emitting one timed event *name* carrying *payload*.

        Must return *body*'s result and re-raise its exceptions unchanged.
        """
        ...
