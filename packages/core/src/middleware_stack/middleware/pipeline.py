"""build_chain — fold middleware definitions into one handler."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ..ports.notifier import INotifier
    from .definition import MiddlewareDefinition


def build_chain(
    definitions: Sequence[MiddlewareDefinition],
    app: Any,
    *,
    notifier: INotifier | None = None,
) -> Any:
    """Build a nested middleware chain ending at *app*.

    The first definition is the **outermost** wrapper and the last one sits
    directly around *app*. Each layer is wrapped in an instrumentation proxy
    when *notifier* is given.
    """
    chain: Any = app

    for definition in reversed(definitions):
        if notifier is not None:
            chain = definition.build_instrumented(chain, notifier)
        else:
            chain = definition.build(chain)

    return chain
