"""Keyed one-shot timers on the running event loop.

Every timer in the client (reconnect backoff, ready timeout, per-message
timeouts, stream expiry, UI flush, typing stop delay) is registered here
under a string key. Scheduling a key again replaces the previous handle,
``cancel`` removes it, and ``cancel_all`` is called at teardown. A cancelled
``loop.call_later`` handle never runs, so an expiry after teardown is a
no-op by construction.

Usage:
    timers = Timers("session")
    timers.schedule("message:temp_1", 30.0, lambda: on_timeout("temp_1"))
    ...
    timers.cancel("message:temp_1")  # acknowledged in time
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from .tasks import BackgroundTasks

logger = logging.getLogger(__name__)


class Timers:
    """Registry of named ``loop.call_later`` handles.

    Callbacks may be plain functions or return awaitables; awaitables are
    scheduled as background tasks. Exceptions are logged with the timer key.
    """

    def __init__(self, owner: str, *, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._owner = owner
        self._loop = loop
        self._handles: dict[str, asyncio.TimerHandle] = {}
        self._tasks = BackgroundTasks(owner)

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None or self._loop.is_closed():
            self._loop = asyncio.get_running_loop()
        return self._loop

    def schedule(self, key: str, delay_s: float, callback: Callable[[], Any]) -> None:
        """Arm ``callback`` after ``delay_s`` seconds, replacing any handle under ``key``."""
        self.cancel(key)
        loop = self._get_loop()
        self._handles[key] = loop.call_later(max(0.0, float(delay_s)), self._fire, key, callback)

    def cancel(self, key: str) -> bool:
        handle = self._handles.pop(key, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def cancel_prefix(self, prefix: str) -> int:
        keys = [key for key in self._handles if key.startswith(prefix)]
        for key in keys:
            self.cancel(key)
        return len(keys)

    def cancel_all(self) -> int:
        count = len(self._handles)
        for handle in self._handles.values():
            handle.cancel()
        self._handles.clear()
        return count

    async def aclose(self) -> None:
        """Cancel pending handles and any callback tasks still running."""
        self.cancel_all()
        await self._tasks.cancel_all()

    def pending(self, key: str) -> bool:
        return key in self._handles

    def keys(self) -> list[str]:
        return list(self._handles)

    def __len__(self) -> int:
        return len(self._handles)

    def _fire(self, key: str, callback: Callable[[], Any]) -> None:
        self._handles.pop(key, None)
        try:
            result = callback()
        except Exception:
            logger.exception("%s: timer %s callback failed", self._owner, key)
            return
        self._tasks.run_result(result, label=f"timer:{key}")


__all__ = ["Timers"]
