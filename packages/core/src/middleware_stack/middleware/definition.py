"""MiddlewareDefinition — descriptor for one entry of the stack."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from .proxy import InstrumentationProxy

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from ..ports.handler import IMiddleware
    from ..ports.notifier import INotifier


@dataclass(frozen=True, eq=False)
class MiddlewareDefinition:
    """Descriptor for a middleware in the stack.

    Supports **deferred instantiation**: the stack stores the *key* (usually
    a middleware class) with its captured construction arguments, and only
    calls it once the inner handler is known.

    Two definitions are equal when their keys are equal; a definition also
    compares equal to its raw key. Arguments never take part in equality.
    """

    key: Any
    args: tuple[Any, ...] = ()
    options: Mapping[str, Any] = field(default_factory=dict)
    block: Callable[..., Any] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", tuple(self.args))
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))

    @property
    def display_name(self) -> str:
        """Name of the key's type, or of the key's runtime type for instances."""
        if isinstance(self.key, type):
            return self.key.__name__
        return type(self.key).__name__

    def build(self, app: Any) -> IMiddleware:
        """Construct the middleware around *app*.

        Calls ``key(app, *args, **options)``, adding ``block=`` when a block
        was captured. Constructor errors propagate unchanged.
        """
        if self.block is None:
            return self.key(app, *self.args, **self.options)
        return self.key(app, *self.args, block=self.block, **self.options)

    def build_instrumented(self, app: Any, notifier: INotifier) -> IMiddleware:
        """Construct the middleware and wrap it in an :class:`InstrumentationProxy`."""
        return InstrumentationProxy(self.build(app), self.display_name, notifier)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, MiddlewareDefinition):
            return bool(self.key == other.key)
        return bool(self.key == other)

    def __hash__(self) -> int:
        return hash(self.key)

    def __repr__(self) -> str:
        return f"MiddlewareDefinition({self.display_name})"
