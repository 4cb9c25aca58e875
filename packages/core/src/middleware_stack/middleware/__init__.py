"""Middleware stack components."""

from .definition import MiddlewareDefinition
from .pipeline import build_chain
from .proxy import EVENT_NAME, InstrumentationProxy
from .registry import MiddlewareStack

__all__ = [
    "EVENT_NAME",
    "InstrumentationProxy",
    "MiddlewareDefinition",
    "MiddlewareStack",
    "build_chain",
]
