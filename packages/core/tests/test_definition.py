from __future__ import annotations

from typing import Any

import pytest

from middleware_stack.instrumentation import Notifier
from middleware_stack.middleware.definition import MiddlewareDefinition
from middleware_stack.middleware.proxy import InstrumentationProxy


class Capture:
    def __init__(
        self, app: Any, *args: Any, block: Any = None, **options: Any
    ) -> None:
        self.app = app
        self.args = args
        self.block = block
        self.options = options

    def __call__(self, request: Any) -> Any:
        return self.app(request)


class Other:
    def __init__(self, app: Any) -> None:
        self.app = app


class Strict:
    def __init__(self, app: Any, level: int) -> None:
        self.app = app
        self.level = level


def test_build_passes_app_first_then_args_options_block() -> None:
    def block() -> str:
        return "configured"

    app = object()
    defn = MiddlewareDefinition(Capture, (1, 2), {"mode": "fast"}, block)

    instance = defn.build(app)

    assert isinstance(instance, Capture)
    assert instance.app is app
    assert instance.args == (1, 2)
    assert instance.options == {"mode": "fast"}
    assert instance.block is block


def test_build_without_block_does_not_pass_block_keyword() -> None:
    defn = MiddlewareDefinition(Strict, (3,))

    instance = defn.build("app")

    assert instance.level == 3


def test_build_propagates_constructor_errors() -> None:
    defn = MiddlewareDefinition(Strict)

    with pytest.raises(TypeError):
        defn.build("app")


def test_build_instrumented_wraps_in_proxy() -> None:
    defn = MiddlewareDefinition(Capture)

    proxy = defn.build_instrumented(lambda r: r, Notifier())

    assert isinstance(proxy, InstrumentationProxy)
    assert isinstance(proxy.middleware, Capture)
    assert proxy("ping") == "ping"


def test_display_name_for_class_and_instance_keys() -> None:
    class Factory:
        def __call__(self, app: Any) -> Any:
            return app

    assert MiddlewareDefinition(Capture).display_name == "Capture"
    assert MiddlewareDefinition(Factory()).display_name == "Factory"


def test_equality_uses_key_only() -> None:
    a = MiddlewareDefinition(Capture, (1,), {"x": 1})
    b = MiddlewareDefinition(Capture, (2,), {"y": 2})
    c = MiddlewareDefinition(Other)

    assert a == b
    assert a == Capture
    assert a != c
    assert a != Other
    assert hash(a) == hash(Capture)


def test_definition_is_immutable() -> None:
    options = {"x": 1}
    defn = MiddlewareDefinition(Capture, [1, 2], options)
    options["x"] = 2

    assert defn.args == (1, 2)
    assert defn.options["x"] == 1
    with pytest.raises(TypeError):
        defn.options["x"] = 3  # type: ignore[index]
    with pytest.raises(AttributeError):
        defn.key = Other  # type: ignore[misc]


def test_repr_shows_display_name() -> None:
    assert repr(MiddlewareDefinition(Capture)) == "MiddlewareDefinition(Capture)"
