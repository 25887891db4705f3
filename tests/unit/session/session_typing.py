"""Unit tests for the typing indicator throttle."""

from __future__ import annotations

import asyncio

from chatlink.helpers.timers import Timers
from chatlink.session import TypingThrottle


class _Clock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def _throttle(clock: _Clock, sent: list[str], **overrides) -> TypingThrottle:
    values = {
        "on_start": lambda: sent.append("start"),
        "on_stop": lambda: sent.append("stop"),
        "start_interval_s": 1.0,
        "stop_interval_s": 0.5,
        "stop_delay_s": 5.0,
        "now_fn": clock,
    }
    values.update(overrides)
    return TypingThrottle(**values)


def test_rapid_keystrokes_emit_one_start() -> None:
    async def _run() -> None:
        clock, sent = _Clock(), []
        throttle = _throttle(clock, sent)

        emitted = [throttle.start_typing() for _ in range(10)]

        stats = throttle.stats()
        assert emitted.count(True) == 1
        assert sent == ["start"]
        assert stats.starts == 1
        assert stats.throttled == 9
        assert stats.reduction_percentage == 90
        assert stats.signaling is True
        await throttle.aclose()

    asyncio.run(_run())


def test_idle_delay_emits_stop() -> None:
    async def _run() -> None:
        clock, sent = _Clock(), []
        throttle = _throttle(clock, sent, stop_delay_s=0.02)

        throttle.start_typing()
        await asyncio.sleep(0.05)

        assert sent == ["start", "stop"]
        assert throttle.signaling is False
        assert throttle.stop_pending() is False

    asyncio.run(_run())


def test_keystrokes_push_back_the_stop_delay() -> None:
    async def _run() -> None:
        clock, sent = _Clock(), []
        throttle = _throttle(clock, sent, stop_delay_s=0.05)

        for _ in range(4):
            throttle.start_typing()
            await asyncio.sleep(0.02)

        assert sent == ["start"]
        await asyncio.sleep(0.08)
        assert sent == ["start", "stop"]

    asyncio.run(_run())


def test_start_after_interval_is_emitted_again() -> None:
    async def _run() -> None:
        clock, sent = _Clock(), []
        throttle = _throttle(clock, sent)

        throttle.start_typing()
        throttle.stop_typing()
        clock.now += 0.5
        assert throttle.is_throttled() is True
        assert throttle.start_typing() is False
        clock.now += 0.6
        throttle.stop_typing()
        assert throttle.start_typing() is True

        assert sent == ["start", "stop", "stop", "start"]
        await throttle.aclose()

    asyncio.run(_run())


def test_repeated_stops_inside_interval_are_suppressed() -> None:
    async def _run() -> None:
        clock, sent = _Clock(), []
        throttle = _throttle(clock, sent)

        throttle.start_typing()
        assert throttle.stop_typing() is True
        clock.now += 0.1
        assert throttle.stop_typing() is False
        clock.now += 1.0
        assert throttle.stop_typing() is True

        assert sent == ["start", "stop", "stop"]
        assert throttle.stats().throttled == 1

    asyncio.run(_run())


def test_force_stop_only_emits_while_signaling() -> None:
    async def _run() -> None:
        clock, sent = _Clock(), []
        throttle = _throttle(clock, sent)

        assert throttle.force_stop() is False
        throttle.start_typing()
        assert throttle.force_stop() is True
        assert throttle.stop_pending() is False
        assert sent == ["start", "stop"]

    asyncio.run(_run())


def test_failing_callback_still_updates_state() -> None:
    async def _run() -> None:
        clock = _Clock()

        def _boom() -> None:
            raise RuntimeError("socket gone")

        throttle = TypingThrottle(on_start=_boom, on_stop=_boom, now_fn=clock, stop_delay_s=5.0)

        assert throttle.start_typing() is True
        assert throttle.signaling is True
        assert throttle.force_stop() is True
        assert throttle.signaling is False
        assert throttle.stats().stops == 1

    asyncio.run(_run())


def test_async_callbacks_are_awaited_in_background() -> None:
    async def _run() -> None:
        clock, sent = _Clock(), []

        async def _start() -> None:
            sent.append("start")

        async def _stop() -> None:
            sent.append("stop")

        throttle = TypingThrottle(on_start=_start, on_stop=_stop, now_fn=clock, stop_delay_s=5.0)
        throttle.start_typing()
        throttle.force_stop()
        await asyncio.sleep(0.01)

        assert sent == ["start", "stop"]
        await throttle.aclose()

    asyncio.run(_run())


def test_reset_clears_counters() -> None:
    async def _run() -> None:
        clock, sent = _Clock(), []
        throttle = _throttle(clock, sent)
        throttle.start_typing()
        throttle.start_typing()

        throttle.reset()

        stats = throttle.stats()
        assert (stats.starts, stats.throttled, stats.reduction_percentage) == (0, 0, 0)
        assert throttle.stop_pending() is False

    asyncio.run(_run())


def test_aclose_leaves_other_keys_of_a_shared_registry() -> None:
    async def _run() -> None:
        clock, sent = _Clock(), []
        timers = Timers("session")
        throttle = _throttle(clock, sent, timers=timers)
        timers.schedule("ready", 5.0, lambda: None)
        throttle.start_typing()
        assert throttle.stop_pending() is True

        await throttle.aclose()

        assert throttle.stop_pending() is False
        assert timers.keys() == ["ready"]
        timers.cancel_all()

    asyncio.run(_run())
