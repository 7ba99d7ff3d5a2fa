"""Tests for the event bus: subscribe, publish, unsubscribe."""

from __future__ import annotations

from collections.abc import Callable
from typing import Annotated

import pytest
from pydantic import BaseModel

from eventbus.domain.bus import EventBus
from eventbus.domain.errors import InvalidHandlerError
from eventbus.domain.markers import handler


class GenericEvent(BaseModel):
    """Payload-carrying event routed to one-argument handlers."""

    value: int = 0


class AnotherEvent(BaseModel):
    """Event only observed by a zero-argument handler."""


class SpecialEvent(GenericEvent):
    """Subtype of GenericEvent."""


class MyListener:
    on_event: Annotated[Callable[[GenericEvent], None], handler()]
    on_another_event: Annotated[Callable[[], None], handler(AnotherEvent)]

    def __init__(self) -> None:
        self.count = 0
        self.count2 = 0

        def on_event(event: GenericEvent) -> None:
            self.count += 1

        def on_another_event() -> None:
            self.count2 += 1

        self.on_event = on_event
        self.on_another_event = on_another_event


class MethodListener:
    """Same handlers as MyListener, declared with the decorator form."""

    def __init__(self) -> None:
        self.seen: list[int] = []
        self.another = 0

    @handler
    def on_event(self, event: GenericEvent) -> None:
        self.seen.append(event.value)

    @handler(AnotherEvent)
    def on_another_event(self) -> None:
        self.another += 1


class SubListener(MyListener):
    pass


class NoHandlers:
    def on_event(self, event: GenericEvent) -> None:
        raise AssertionError("unmarked methods are never called")


@pytest.fixture()
def bus():
    bus = EventBus()
    yield bus
    bus.unsubscribe_all()


@pytest.fixture()
def listener():
    return MyListener()


# ---------------------------------------------------------------------------
# Subscribe / publish
# ---------------------------------------------------------------------------


def test_publish(bus, listener):
    bus.subscribe(listener)
    bus.publish(GenericEvent())
    assert listener.count == 1


def test_subscribe(bus, listener):
    bus.subscribe(listener)
    assert len(bus.registry) == 1
    assert bus.is_subscribed(listener)
    assert [h.field_name for h in bus.handlers_for(listener)] == [
        "on_event",
        "on_another_event",
    ]


def test_unsubscribe(bus, listener):
    bus.subscribe(listener)
    assert len(bus.registry) == 1
    bus.publish(GenericEvent())
    assert listener.count == 1

    bus.unsubscribe(listener)
    assert len(bus.registry) == 0
    bus.publish(GenericEvent())  # ignored
    assert listener.count == 1


def test_ping_scenario(bus, listener):
    """Counter follows subscribe → publish → wrong type → unsubscribe → publish."""
    bus.subscribe(listener)
    assert len(bus.registry) == 1

    bus.publish(GenericEvent())
    assert listener.count == 1

    bus.publish("not a GenericEvent")
    assert listener.count == 1

    bus.unsubscribe(listener)
    assert len(bus.registry) == 0
    bus.publish(GenericEvent())
    assert listener.count == 1


def test_multiple_listeners(bus):
    listeners = [MyListener(), MyListener(), MyListener()]
    for item in listeners:
        bus.subscribe(item)
    assert len(bus.registry) == 3

    bus.publish(GenericEvent())
    assert [item.count for item in listeners] == [1, 1, 1]


def test_register_class_with_no_handlers(bus):
    bus.subscribe(NoHandlers())
    bus.subscribe(object())
    assert len(bus.registry) == 0


def test_handler_no_args(bus, listener):
    bus.subscribe(listener)
    bus.publish(AnotherEvent())
    assert listener.count2 == 1
    assert listener.count == 0


def test_collect_listeners_from_super(bus):
    sub = SubListener()
    bus.subscribe(sub)
    assert len(bus.registry) == 1

    bus.publish(GenericEvent())
    assert sub.count == 1


def test_decorated_methods_receive_payload(bus):
    listener = MethodListener()
    bus.subscribe(listener)

    bus.publish(GenericEvent(value=7))
    bus.publish(AnotherEvent())

    assert listener.seen == [7]
    assert listener.another == 1


def test_subtype_event_reaches_supertype_handler(bus, listener):
    bus.subscribe(listener)
    bus.publish(SpecialEvent(value=3))
    assert listener.count == 1


def test_resubscribe_replaces_handlers(bus, listener):
    bus.subscribe(listener)
    bus.subscribe(listener)
    assert len(bus.registry) == 1

    bus.publish(GenericEvent())
    assert listener.count == 1


def test_unsubscribe_unknown_instance_is_noop(bus, listener):
    bus.unsubscribe(listener)
    assert len(bus.registry) == 0


def test_unsubscribe_all(bus):
    listeners = [MyListener(), MethodListener()]
    for item in listeners:
        bus.subscribe(item)

    bus.unsubscribe_all()
    bus.publish(GenericEvent())

    assert len(bus.registry) == 0
    assert listeners[0].count == 0
    assert listeners[1].seen == []


def test_subscribe_does_not_deliver(bus, listener):
    bus.subscribe(listener)
    assert listener.count == 0
    assert listener.count2 == 0


# ---------------------------------------------------------------------------
# Invalid handlers
# ---------------------------------------------------------------------------


class ZeroArgWithoutType:
    @handler
    def on_event1(self) -> None:
        pass


class NonFunctionWithType:
    on_event2: Annotated[object, handler(GenericEvent)]

    def __init__(self) -> None:
        self.on_event2 = object()


class HalfValid:
    @handler
    def on_good(self, event: GenericEvent) -> None:
        pass

    @handler(GenericEvent)
    def on_bad(self, event: GenericEvent) -> None:
        pass


def test_invalid_handler(bus):
    with pytest.raises(InvalidHandlerError, match="one-argument"):
        bus.subscribe(ZeroArgWithoutType())
    with pytest.raises(InvalidHandlerError, match="zero-argument"):
        bus.subscribe(NonFunctionWithType())
    assert len(bus.registry) == 0


def test_failed_discovery_registers_nothing(bus):
    with pytest.raises(InvalidHandlerError) as excinfo:
        bus.subscribe(HalfValid())

    assert excinfo.value.owner is HalfValid
    assert excinfo.value.field_name == "on_bad"
    assert len(bus.registry) == 0


# ---------------------------------------------------------------------------
# Handler errors and re-entrancy
# ---------------------------------------------------------------------------


class Exploding:
    def __init__(self) -> None:
        self.after = 0

    @handler(GenericEvent)
    def boom(self) -> None:
        raise RuntimeError("boom")

    @handler(GenericEvent)
    def after_boom(self) -> None:
        self.after += 1


def test_handler_error_propagates_and_stops_delivery(bus):
    exploding = Exploding()
    bus.subscribe(exploding)

    with pytest.raises(RuntimeError, match="boom"):
        bus.publish(GenericEvent())
    assert exploding.after == 0


class Recruiter:
    """Subscribes a new listener and unsubscribes itself while handling."""

    def __init__(self, bus: EventBus) -> None:
        self.bus = bus
        self.recruit = MyListener()
        self.calls = 0

    @handler
    def on_event(self, event: GenericEvent) -> None:
        self.calls += 1
        self.bus.subscribe(self.recruit)
        self.bus.unsubscribe(self)


def test_registry_changes_during_publish_apply_to_later_calls(bus):
    recruiter = Recruiter(bus)
    bus.subscribe(recruiter)

    bus.publish(GenericEvent())
    assert recruiter.calls == 1
    assert recruiter.recruit.count == 0
    assert not bus.is_subscribed(recruiter)

    bus.publish(GenericEvent())
    assert recruiter.calls == 1
    assert recruiter.recruit.count == 1
