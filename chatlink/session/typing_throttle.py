"""Typing indicator throttle.

Keystrokes arrive many times per second; the server only needs to know when
typing starts and when it stops. The throttle turns raw ``start_typing()``
calls into at most one typing-start per ``start_interval_s`` and emits
typing-stop once the user has been idle for ``stop_delay_s``.

Counters record what was sent and what was suppressed; the reduction
percentage is the share of signals that never reached the network.

Callbacks may be sync or async. Internal state is updated before a callback
runs, and callback failures are logged, so a broken transport can never
leave the throttle thinking it is still signaling.
"""

from __future__ import annotations

import time
import logging
from collections.abc import Callable
from typing import Any

from chatlink.config.indicators import (
    TYPING_START_INTERVAL_S,
    TYPING_STOP_INTERVAL_S,
    TYPING_STOP_DELAY_S,
)
from chatlink.helpers.tasks import BackgroundTasks
from chatlink.helpers.timers import Timers
from chatlink.state.indicators import TypingState, TypingStats

logger = logging.getLogger(__name__)

TimeFn = Callable[[], float]
SignalFn = Callable[[], Any]

_STOP_TIMER = "typing:stop"


class TypingThrottle:
    """Rate-limits typing start/stop signals."""

    def __init__(
        self,
        *,
        on_start: SignalFn,
        on_stop: SignalFn,
        start_interval_s: float = TYPING_START_INTERVAL_S,
        stop_interval_s: float = TYPING_STOP_INTERVAL_S,
        stop_delay_s: float = TYPING_STOP_DELAY_S,
        now_fn: TimeFn | None = None,
        timers: Timers | None = None,
    ) -> None:
        self._on_start = on_start
        self._on_stop = on_stop
        self.start_interval_s = float(start_interval_s)
        self.stop_interval_s = float(stop_interval_s)
        self.stop_delay_s = float(stop_delay_s)
        self._now = now_fn or time.monotonic
        self._owns_timers = timers is None
        self._timers = timers or Timers("typing")
        self._tasks = BackgroundTasks("typing")
        self._state = TypingState()

    @property
    def signaling(self) -> bool:
        return self._state.signaling

    def stop_pending(self) -> bool:
        return self._timers.pending(_STOP_TIMER)

    def _start_allowed(self, now: float) -> bool:
        last = self._state.last_start_at
        return last is None or (now - last) >= self.start_interval_s

    def is_throttled(self) -> bool:
        """Whether a ``start_typing()`` right now would be suppressed."""
        return self._state.signaling or not self._start_allowed(self._now())

    def start_typing(self) -> bool:
        """Record a keystroke. Returns True when typing-start was emitted."""
        now = self._now()
        emitted = False
        if not self._state.signaling and self._start_allowed(now):
            self._state.signaling = True
            self._state.last_start_at = now
            self._state.starts += 1
            emitted = True
            self._invoke(self._on_start, "typing_start")
        else:
            self._state.throttled += 1
        self._timers.schedule(_STOP_TIMER, self.stop_delay_s, self._on_stop_delay)
        return emitted

    def stop_typing(self) -> bool:
        """Explicit stop (message sent, input cleared). Returns True if emitted."""
        self._timers.cancel(_STOP_TIMER)
        last_stop = self._state.last_stop_at
        now = self._now()
        if not self._state.signaling and last_stop is not None and (now - last_stop) < self.stop_interval_s:
            self._state.throttled += 1
            return False
        self._emit_stop(now)
        return True

    def force_stop(self) -> bool:
        """Stop regardless of intervals; used at teardown and chat switch."""
        self._timers.cancel(_STOP_TIMER)
        if not self._state.signaling:
            return False
        self._emit_stop(self._now())
        return True

    def reset(self) -> None:
        self._timers.cancel(_STOP_TIMER)
        self._state.reset()

    def stats(self) -> TypingStats:
        state = self._state
        total = state.starts + state.stops + state.throttled
        reduction = round(state.throttled / total * 100) if total else 0
        return TypingStats(
            starts=state.starts,
            stops=state.stops,
            throttled=state.throttled,
            reduction_percentage=reduction,
            signaling=state.signaling,
        )

    async def aclose(self) -> None:
        """Cancel the stop-delay timer and pending callbacks.

        A shared ``Timers`` registry is left alone apart from this throttle's key.
        """
        if self._owns_timers:
            await self._timers.aclose()
        else:
            self._timers.cancel(_STOP_TIMER)
        await self._tasks.cancel_all()

    def _on_stop_delay(self) -> None:
        if self._state.signaling:
            self._emit_stop(self._now())

    def _emit_stop(self, now: float) -> None:
        self._state.signaling = False
        self._state.last_stop_at = now
        self._state.stops += 1
        self._invoke(self._on_stop, "typing_stop")

    def _invoke(self, callback: SignalFn, label: str) -> None:
        try:
            result = callback()
        except Exception:
            logger.exception("typing: %s callback failed", label)
            return
        self._tasks.run_result(result, label=label)


__all__ = ["TypingThrottle"]
