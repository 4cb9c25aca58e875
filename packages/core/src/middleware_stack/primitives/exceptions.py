"""Configuration errors raised by the middleware stack."""

from __future__ import annotations


class MiddlewareStackError(Exception):
    """Root exception for the middleware-stack package."""


class UnknownMiddlewareError(MiddlewareStackError, LookupError):
    """Raised when a key or index does not resolve to a stack entry.

    Usage: every positional operation (``insert_before``, ``insert_after``,
    ``swap``, ``move_before``, ``move_after``) raises this instead of
    falling back to an arbitrary position.
    """

    def __init__(self, reference: object, operation: str) -> None:
        self.reference = reference
        self.operation = operation
        super().__init__(f"No such middleware to {operation}: {reference!r}")


class FrozenStackError(MiddlewareStackError):
    """Raised when a stack is mutated after ``build`` has frozen it."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(
            f"Cannot {operation} middleware: the stack was frozen by build()"
        )
