"""Background task tracking.

Callbacks such as timer expiries and listener handlers may return
coroutines. They are scheduled here with a strong reference so they are not
garbage collected mid-flight, and any exception they raise is logged instead
of vanishing into "Task exception was never retrieved".
"""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
from collections.abc import Awaitable
from typing import Any

logger = logging.getLogger(__name__)


class BackgroundTasks:
    """Strong-reference set of fire-and-forget tasks."""

    def __init__(self, owner: str) -> None:
        self._owner = owner
        self._tasks: set[asyncio.Task] = set()

    def spawn(self, aw: Awaitable[Any], *, label: str) -> asyncio.Task:
        task = asyncio.ensure_future(aw)
        self._tasks.add(task)
        task.add_done_callback(lambda t: self._on_done(t, label))
        return task

    def run_result(self, result: Any, *, label: str) -> None:
        """Schedule ``result`` when it is awaitable; ignore plain values."""
        if inspect.isawaitable(result):
            self.spawn(result, label=label)

    def _on_done(self, task: asyncio.Task, label: str) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "%s: background task %s failed: %s",
                self._owner,
                label,
                exc,
                exc_info=(type(exc), exc, exc.__traceback__),
            )

    async def cancel_all(self) -> None:
        tasks = [t for t in self._tasks if t is not asyncio.current_task()]
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await task
        self._tasks.difference_update(tasks)

    def __len__(self) -> int:
        return len(self._tasks)


async def cancel_task(task: asyncio.Task | None) -> None:
    """Cancel an asyncio task and await its completion.

    Safely handles None tasks and already-completed tasks.
    """
    if not task or task.done():
        return
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError, Exception):
        await task


__all__ = ["BackgroundTasks", "cancel_task"]
