"""Unit tests for the event bus."""

from __future__ import annotations

import asyncio

from chatlink.events import Event, EventBus, EventKind


def test_subscribing_the_same_handler_twice_delivers_once() -> None:
    bus = EventBus()
    seen: list[Event] = []

    bus.subscribe(EventKind.PROCESSING, seen.append)
    bus.subscribe(EventKind.PROCESSING, seen.append)
    delivered = bus.emit(EventKind.PROCESSING, None)

    assert delivered == 1
    assert len(seen) == 1
    assert bus.listener_count(EventKind.PROCESSING) == 1


def test_bound_methods_are_deduplicated() -> None:
    class Listener:
        def __init__(self) -> None:
            self.calls = 0

        def on_event(self, event: Event) -> None:
            self.calls += 1

    bus = EventBus()
    listener = Listener()
    bus.subscribe("custom", listener.on_event)
    bus.subscribe("custom", listener.on_event)
    bus.emit("custom")

    assert listener.calls == 1


def test_unsubscribe_callable() -> None:
    bus = EventBus()
    seen: list[Event] = []
    unsubscribe = bus.subscribe(EventKind.ERROR, seen.append)

    assert unsubscribe() is True
    assert unsubscribe() is False
    bus.emit(EventKind.ERROR)
    assert seen == []


def test_failing_handler_does_not_block_others() -> None:
    bus = EventBus()
    seen: list[str] = []

    def broken(event: Event) -> None:
        raise RuntimeError("boom")

    bus.subscribe(EventKind.PING, broken)
    bus.subscribe(EventKind.PING, lambda event: seen.append(event.name))
    bus.emit(EventKind.PING)

    assert seen == ["ping"]


def test_wildcard_receives_unknown_kinds() -> None:
    bus = EventBus()
    seen: list[str] = []
    bus.subscribe_all(lambda event: seen.append(event.name))

    bus.emit("server_only_kind", {"x": 1})
    bus.emit(EventKind.STATE_CHANGED)

    assert seen == ["server_only_kind", "state_changed"]


def test_async_handlers_are_scheduled() -> None:
    async def _run() -> None:
        bus = EventBus()
        seen: list[str] = []

        async def handler(event: Event) -> None:
            await asyncio.sleep(0)
            seen.append(event.name)

        bus.subscribe(EventKind.MESSAGE_UPDATED, handler)
        bus.emit(EventKind.MESSAGE_UPDATED)
        await asyncio.sleep(0.01)
        await bus.aclose()

        assert seen == ["message_updated"]

    asyncio.run(_run())
