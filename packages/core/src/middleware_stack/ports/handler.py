"""IMiddleware — wrapping handler protocol."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class IMiddleware(Protocol):
    """A live handler in a built chain.

    A middleware holds the next-inner handler it was constructed with and
    decides whether, and how, to call it. Request flow follows registration
    order; responses unwind in reverse as the nested calls return.
    """

    def __call__(self, request: Any) -> Any:
        """Handle *request*, usually by delegating to the inner handler.

        Parameters
        ----------
        request:
            Whatever the terminal handler accepts; opaque to the stack.

        Returns
        -------
        The response produced by this layer or by the inner chain.
        """
        ...


class IMiddlewareFactory(Protocol):
    """Anything registered as a stack key: called with the inner handler first.

    Classes implementing :class:`IMiddleware` satisfy this protocol through
    their constructor.
    """

    def __call__(self, app: Any, *args: Any, **options: Any) -> IMiddleware: ...
