from __future__ import annotations

import logging

import pytest

from middleware_stack.instrumentation import (
    InstrumentationEvent,
    Notifier,
    get_notifier,
    set_notifier,
)


class RecordingSubscriber:
    def __init__(self, name: str, order: list[str]) -> None:
        self._name = name
        self._order = order

    def __call__(self, event: InstrumentationEvent) -> None:
        self._order.append(f"{self._name}:{event.name}")


def test_instrument_returns_body_result_and_publishes_event() -> None:
    notifier = Notifier()
    events: list[InstrumentationEvent] = []
    notifier.subscribe(events.append)

    result = notifier.instrument("op.run", {"k": "v"}, lambda: 42)

    assert result == 42
    assert len(events) == 1
    event = events[0]
    assert event.name == "op.run"
    assert event.payload == {"k": "v"}
    assert event.outcome == "success"
    assert event.exception is None
    assert event.finished_at >= event.started_at
    assert event.duration_ms == event.duration * 1000


def test_instrument_reraises_and_reports_exception() -> None:
    notifier = Notifier()
    events: list[InstrumentationEvent] = []
    notifier.subscribe(events.append)

    def body() -> None:
        raise KeyError("missing")

    with pytest.raises(KeyError):
        notifier.instrument("op.run", {}, body)

    assert events[0].outcome == "error"
    assert isinstance(events[0].exception, KeyError)


def test_subscribers_run_in_priority_order() -> None:
    order: list[str] = []
    notifier = Notifier()
    notifier.subscribe(RecordingSubscriber("late", order), priority=10)
    notifier.subscribe(RecordingSubscriber("early", order), priority=-10)

    notifier.instrument("op", {}, lambda: None)

    assert order == ["early:op", "late:op"]


def test_pattern_filtering_and_is_subscribed() -> None:
    order: list[str] = []
    notifier = Notifier()
    notifier.subscribe(RecordingSubscriber("mw", order), pattern="process_middleware.*")

    assert notifier.is_subscribed("process_middleware.middleware_stack")
    assert not notifier.is_subscribed("render.template")

    notifier.instrument("render.template", {}, lambda: None)
    assert order == []


def test_disabled_subscription_and_cache_clear() -> None:
    order: list[str] = []
    notifier = Notifier()
    sub = notifier.subscribe(RecordingSubscriber("off", order), enabled=False)

    assert not notifier.is_subscribed("op")

    sub.enabled = True
    assert notifier.is_subscribed("op")

    sub.clear_cache()
    notifier.clear_caches()
    notifier.clear()
    assert not notifier.is_subscribed("op")


def test_unsubscribe_by_subscription_or_subscriber() -> None:
    order: list[str] = []
    notifier = Notifier()
    subscriber = RecordingSubscriber("a", order)
    sub = notifier.subscribe(subscriber)
    notifier.unsubscribe(sub)
    assert not notifier.is_subscribed("op")

    notifier.subscribe(subscriber, pattern="x.*")
    notifier.subscribe(subscriber, pattern="y.*")
    notifier.unsubscribe(subscriber)
    assert not notifier.is_subscribed("x.a")
    assert not notifier.is_subscribed("y.a")


def test_failing_subscriber_is_logged_and_others_still_run(
    caplog: pytest.LogCaptureFixture,
) -> None:
    order: list[str] = []
    notifier = Notifier()

    def explode(event: InstrumentationEvent) -> None:
        raise RuntimeError("boom")

    notifier.subscribe(explode, priority=0)
    notifier.subscribe(RecordingSubscriber("after", order), priority=1)

    with caplog.at_level(logging.WARNING, logger="middleware_stack.instrumentation"):
        assert notifier.instrument("op", {}, lambda: "ok") == "ok"

    assert order == ["after:op"]
    assert any("boom" in r.getMessage() for r in caplog.records)


def test_context_notifier_get_and_set() -> None:
    original = get_notifier()
    try:
        assert get_notifier() is original
        custom = Notifier()
        set_notifier(custom)
        assert get_notifier() is custom
    finally:
        set_notifier(original)


def test_subscribing_during_delivery_does_not_redeliver() -> None:
    received: list[str] = []
    notifier = Notifier()

    def first(event: InstrumentationEvent) -> None:
        received.append("first")
        if len(received) == 1:
            notifier.subscribe(lambda e: received.append("late"), priority=-1)

    notifier.subscribe(first)

    notifier.instrument("op", {}, lambda: None)

    assert received == ["first"]


class Abort(BaseException):
    pass


def test_base_exception_from_body_still_publishes_event() -> None:
    notifier = Notifier()
    events: list[InstrumentationEvent] = []
    notifier.subscribe(events.append)

    def body() -> None:
        raise Abort

    with pytest.raises(Abort):
        notifier.instrument("op", {}, body)

    assert len(events) == 1
    assert events[0].outcome == "error"
    assert isinstance(events[0].exception, Abort)
