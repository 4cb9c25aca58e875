"""Primitives — exceptions shared by every layer."""

from .exceptions import (
    FrozenStackError,
    MiddlewareStackError,
    UnknownMiddlewareError,
)

__all__ = [
    "FrozenStackError",
    "MiddlewareStackError",
    "UnknownMiddlewareError",
]
