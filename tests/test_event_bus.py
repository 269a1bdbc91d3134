import asyncio

import pytest

from mergegrid.events.bus import EventBus, EngineEvent
from tests.helpers import make_engine


@pytest.mark.asyncio
async def test_publish_without_subscribers_returns_original_payload():
    bus = EventBus()
    payload = {"value": 42}
    result = await bus.publish("nobody-listens", payload)
    assert result.cancelled is False
    assert result.payload is payload


@pytest.mark.asyncio
async def test_handlers_run_in_subscription_order_and_await_async_work():
    bus = EventBus()
    order = []

    async def slow(event):
        await asyncio.sleep(0.01)
        order.append("slow")

    def fast(event):
        order.append("fast")

    bus.subscribe("test", slow)
    bus.subscribe("test", fast)
    await bus.publish("test")
    assert order == ["slow", "fast"]


@pytest.mark.asyncio
async def test_cancel_stops_later_handlers():
    bus = EventBus()
    seen = []

    def first(event):
        seen.append("first")
        event.cancel()

    bus.subscribe(EngineEvent.BEFORE_RESET, first)
    bus.subscribe(EngineEvent.BEFORE_RESET, lambda event: seen.append("second"))
    result = await bus.publish(EngineEvent.BEFORE_RESET)
    assert result.cancelled is True
    assert seen == ["first"]


@pytest.mark.asyncio
async def test_last_payload_mutation_wins():
    bus = EventBus()

    def double(event):
        event.payload = event.payload * 2

    def plus_one(event):
        event.payload = event.payload + 1

    bus.subscribe("calc", double)
    bus.subscribe("calc", plus_one)
    result = await bus.publish("calc", 5)
    assert result.payload == 11


@pytest.mark.asyncio
async def test_enum_and_string_names_share_subscriptions():
    bus = EventBus()
    received = []
    bus.subscribe("after:reset", lambda event: received.append(event.name))
    await bus.publish(EngineEvent.AFTER_RESET)
    assert received == ["after:reset"]


@pytest.mark.asyncio
async def test_subscribe_once_runs_a_single_time():
    bus = EventBus()
    calls = []
    bus.subscribe_once("ping", lambda event: calls.append("once"))
    bus.subscribe("ping", lambda event: calls.append("always"))
    await bus.publish("ping")
    await bus.publish("ping")
    assert calls == ["once", "always", "always"]


@pytest.mark.asyncio
async def test_subscriptions_changed_during_dispatch_apply_next_publish():
    bus = EventBus()
    calls = []

    def late(event):
        calls.append("late")

    def adder(event):
        calls.append("adder")
        bus.subscribe("grow", late)

    bus.subscribe("grow", adder)
    await bus.publish("grow")
    assert calls == ["adder"]
    await bus.publish("grow")
    assert calls == ["adder", "adder", "late"]


@pytest.mark.asyncio
async def test_unsubscribe_single_handler_and_all_handlers():
    bus = EventBus()
    calls = []

    def a(event):
        calls.append("a")

    def b(event):
        calls.append("b")

    bus.subscribe("x", a)
    bus.subscribe("x", b)
    bus.unsubscribe("x", a)
    await bus.publish("x")
    assert calls == ["b"]

    bus.unsubscribe("x")
    await bus.publish("x")
    assert calls == ["b"]
    assert bus.handlers("x") == []


@pytest.mark.asyncio
async def test_handler_error_aborts_dispatch_and_propagates():
    bus = EventBus()
    calls = []

    def broken(event):
        raise RuntimeError("boom")

    bus.subscribe("fail", broken)
    bus.subscribe("fail", lambda event: calls.append("after"))
    with pytest.raises(RuntimeError, match="boom"):
        await bus.publish("fail")
    assert calls == []


@pytest.mark.asyncio
async def test_bound_methods_stay_connected_without_external_reference():
    bus = EventBus()
    received = []

    class Listener:
        def on_event(self, event):
            received.append(event.payload)

    bus.subscribe("bound", Listener().on_event)
    await bus.publish("bound", 3)
    assert received == [3]


@pytest.mark.asyncio
async def test_stop_propagation_skips_later_handlers_without_cancelling():
    bus = EventBus()
    seen = []

    def first(event):
        seen.append("first")
        event.payload = "from first"
        event.stop_propagation()

    bus.subscribe("halt", first)
    bus.subscribe("halt", lambda event: seen.append("second"))
    result = await bus.publish("halt", "original")
    assert seen == ["first"]
    assert result.cancelled is False
    assert result.payload == "from first"


@pytest.mark.asyncio
async def test_stop_propagation_lets_the_operation_proceed():
    engine, _ = make_engine()
    engine.subscribe(EngineEvent.BEFORE_RESET, lambda event: event.stop_propagation())
    engine.subscribe(EngineEvent.BEFORE_RESET, lambda event: event.cancel())
    assert await engine.reset() is True
    assert engine.board.occupied_count() == 9


@pytest.mark.asyncio
async def test_unsubscribe_all_clears_every_event_name():
    bus = EventBus()
    calls = []
    bus.subscribe("a", lambda event: calls.append("a"))
    bus.subscribe_once("b", lambda event: calls.append("b"))
    bus.subscribe(EngineEvent.AFTER_RESET, lambda event: calls.append("reset"))
    bus.unsubscribe_all()
    for name in ("a", "b", EngineEvent.AFTER_RESET):
        await bus.publish(name)
        assert bus.handlers(name) == []
    assert calls == []

    bus.subscribe("a", lambda event: calls.append("again"))
    await bus.publish("a")
    assert calls == ["again"]
