"""Ports — protocols for the collaborators of the middleware stack."""

from .handler import IMiddleware, IMiddlewareFactory
from .notifier import INotifier

__all__ = [
    "IMiddleware",
    "IMiddlewareFactory",
    "INotifier",
]
