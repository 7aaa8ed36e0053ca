from __future__ import annotations

import pytest

from tickdebounce.core.engine.router import EngineRouter
from tickdebounce.core.events.bus import EventBus
from tickdebounce.core.events.debounce import DebounceEvent
from tickdebounce.core.options import EventKind


def _event(name: str, seq: int = 1, payload=None) -> DebounceEvent:
    return DebounceEvent.create(event_type=name, kind=None, payload=payload, sequence=seq)


def test_dispatch_follows_subscription_order() -> None:
    bus = EventBus()
    order: list[str] = []
    bus.subscribe(event_type="x", handler=lambda e: order.append("first"))
    bus.subscribe(event_type="x", handler=lambda e: order.append("second"))
    bus.subscribe(event_type="y", handler=lambda e: order.append("other"))

    bus.publish(_event("x"))

    assert order == ["first", "second"]


def test_publish_is_fail_fast() -> None:
    bus = EventBus()

    def broken(e: DebounceEvent) -> None:
        raise RuntimeError("handler failed")

    bus.subscribe(event_type="x", handler=broken)
    with pytest.raises(RuntimeError):
        bus.publish(_event("x"))


def test_unsubscribe_removes_a_single_registration() -> None:
    bus = EventBus()
    calls: list[int] = []

    def handler(e: DebounceEvent) -> None:
        calls.append(e.sequence)

    first = bus.subscribe(event_type="x", handler=handler)
    bus.subscribe(event_type="x", handler=handler)

    assert bus.unsubscribe(first) is True
    bus.publish(_event("x", seq=7))

    assert calls == [7]


def test_handler_may_unsubscribe_itself_while_dispatching() -> None:
    bus = EventBus()
    calls: list[str] = []
    subs = {}

    def once(e: DebounceEvent) -> None:
        calls.append("once")
        bus.unsubscribe(subs["once"])

    subs["once"] = bus.subscribe(event_type="x", handler=once)
    bus.subscribe(event_type="x", handler=lambda e: calls.append("always"))

    bus.publish(_event("x"))
    bus.publish(_event("x"))

    assert calls == ["once", "always", "always"]


def test_empty_event_type_is_rejected() -> None:
    with pytest.raises(ValueError):
        EventBus().subscribe(event_type="", handler=print)


def test_clear() -> None:
    bus = EventBus()
    bus.subscribe(event_type="x", handler=print)
    bus.subscribe(event_type="y", handler=print)

    bus.clear("x")
    assert bus.event_types() == ("y",)
    bus.clear()
    assert bus.event_types() == ()


def test_event_records_are_unique_and_carry_payload() -> None:
    a = DebounceEvent.create(event_type="r", kind=EventKind.CALLBACK_RESPONSE, payload=[1], sequence=1)
    b = DebounceEvent.create(event_type="r", kind=EventKind.CALLBACK_RESPONSE, payload=[1], sequence=2)

    assert a.event_id != b.event_id
    assert a.payload == [1]
    assert a.timestamp_utc.tzinfo is not None


class _Component:
    def __init__(self, subs) -> None:
        self._subs = subs

    def subscriptions(self):
        return self._subs


def test_router_registers_and_unregisters_components() -> None:
    bus = EventBus()
    router = EngineRouter(bus=bus)

    def h(e: DebounceEvent) -> None:
        pass

    wiring = router.register([_Component([("a", h), ("b", h)])])
    assert wiring.event_types() == ("a", "b")
    assert wiring.subscriptions[0].component == "_Component"

    router.unregister(wiring)
    assert bus.event_types() == ()


def test_router_rejects_bad_components() -> None:
    router = EngineRouter(bus=EventBus())

    def h(e: DebounceEvent) -> None:
        pass

    with pytest.raises(RuntimeError):
        router.register([_Component([("a", h), ("a", h)])])
    with pytest.raises(ValueError):
        router.register([_Component([("", h)])])
    with pytest.raises(TypeError):
        router.register([_Component(iter([("a", h)]))])


def test_failed_registration_leaves_bus_untouched() -> None:
    bus = EventBus()
    router = EngineRouter(bus=bus)

    def h(e: DebounceEvent) -> None:
        pass

    with pytest.raises(RuntimeError):
        router.register([_Component([("a", h)]), _Component([("b", h), ("b", h)])])
    with pytest.raises(ValueError):
        router.register([_Component([("c", h)]), _Component([("", h)])])

    assert bus.event_types() == ()
