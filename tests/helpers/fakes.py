"""In-memory stand-ins for the socket, the connector and the platform API."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from typing import Any

from chatlink.config.session import SESSION_TITLE

_CLOSED = object()


class FakeWebSocket:
    """Async-iterable socket double.

    ``push`` queues an inbound frame, ``server_close`` ends iteration with a
    close code the way a real connection does when the peer closes.
    """

    def __init__(self) -> None:
        self.sent: list[str] = []
        self.close_code: int | None = None
        self.close_reason: str | None = None
        self.client_close: tuple[int, str] | None = None
        self.fail_sends = False
        self._inbox: asyncio.Queue[Any] = asyncio.Queue()

    def push(self, frame: dict[str, Any] | str) -> None:
        raw = frame if isinstance(frame, str) else json.dumps(frame)
        self._inbox.put_nowait(raw)

    def server_close(self, code: int, reason: str = "") -> None:
        self.close_code = code
        self.close_reason = reason
        self._inbox.put_nowait(_CLOSED)

    async def send(self, data: str) -> None:
        if self.fail_sends or self.close_code is not None:
            raise ConnectionResetError("socket is closed")
        self.sent.append(data)

    async def close(self, code: int = 1000, reason: str = "") -> None:
        self.client_close = (code, reason)
        if self.close_code is None:
            self.close_code = code
            self.close_reason = reason
        self._inbox.put_nowait(_CLOSED)

    def __aiter__(self) -> FakeWebSocket:
        return self

    async def __anext__(self) -> str:
        item = await self._inbox.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        return item

    def frames(self) -> list[dict[str, Any]]:
        return [json.loads(raw) for raw in self.sent]

    def sent_types(self) -> list[str]:
        return [frame["type"] for frame in self.frames()]


class FakeConnector:
    """``connect_fn`` double: hands out sockets or raises queued errors."""

    def __init__(self, *outcomes: FakeWebSocket | BaseException) -> None:
        self._outcomes = list(outcomes)
        self.urls: list[str] = []
        self.sockets: list[FakeWebSocket] = []

    async def __call__(self, url: str) -> FakeWebSocket:
        self.urls.append(url)
        outcome = self._outcomes.pop(0) if self._outcomes else FakeWebSocket()
        if isinstance(outcome, BaseException):
            raise outcome
        self.sockets.append(outcome)
        return outcome

    @property
    def latest(self) -> FakeWebSocket:
        return self.sockets[-1]


class FakePlatform:
    """Platform service double with scripted creation outcomes."""

    def __init__(
        self,
        *outcomes: str | BaseException,
        ready: bool = True,
        create_delay_s: float = 0.0,
    ) -> None:
        self._outcomes = list(outcomes)
        self.ready = ready
        self.create_delay_s = create_delay_s
        self.probe_calls = 0
        self.create_calls: list[dict[str, Any]] = []

    async def check_ready(self) -> bool:
        self.probe_calls += 1
        return self.ready

    async def create_chat(self, *, session_id: str, visitor_id: str, title: str = SESSION_TITLE) -> str:
        self.create_calls.append({"session_id": session_id, "visitor_id": visitor_id, "title": title})
        if self.create_delay_s:
            await asyncio.sleep(self.create_delay_s)
        outcome = self._outcomes.pop(0) if self._outcomes else f"chat_{len(self.create_calls)}"
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


async def wait_until(predicate: Callable[[], bool], timeout_s: float = 1.0) -> None:
    """Yield to the loop until ``predicate()`` holds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout_s
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.001)


__all__ = ["FakeConnector", "FakePlatform", "FakeWebSocket", "wait_until"]
