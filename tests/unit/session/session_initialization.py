"""Unit tests for readiness polling and session creation retries."""

from __future__ import annotations

import asyncio

import pytest

from chatlink.errors import SessionCreationError, TransportError
from chatlink.session import create_session_with_retries, wait_for_platform_ready
from tests.helpers.fakes import FakePlatform


def _server_error() -> SessionCreationError:
    return SessionCreationError("HTTP 500", kind="server", status_code=500, retryable=True)


def test_creation_retries_until_success() -> None:
    async def _run() -> None:
        platform = FakePlatform(_server_error(), _server_error(), "chat_ok")

        session = await create_session_with_retries(
            platform,
            tenant_id="acme",
            max_retries=3,
            retry_delay_s=0.0,
        )

        assert session.chat_id == "chat_ok"
        assert session.degraded is False
        assert session.tenant_id == "acme"
        assert len(platform.create_calls) == 3
        session_ids = {call["session_id"] for call in platform.create_calls}
        assert session_ids == {session.session_id}

    asyncio.run(_run())


def test_non_retryable_failure_raises_immediately() -> None:
    async def _run() -> None:
        denied = SessionCreationError("HTTP 401", kind="auth", status_code=401)
        platform = FakePlatform(denied, "chat_never")

        with pytest.raises(SessionCreationError, match="401"):
            await create_session_with_retries(platform, tenant_id="acme", max_retries=3, retry_delay_s=0.0)
        assert len(platform.create_calls) == 1

    asyncio.run(_run())


def test_exhaustion_falls_back_to_degraded_session() -> None:
    async def _run() -> None:
        platform = FakePlatform(_server_error(), _server_error())

        session = await create_session_with_retries(
            platform,
            tenant_id="acme",
            session_id="session_abcdefgh",
            max_retries=2,
            retry_delay_s=0.0,
        )

        assert session.degraded is True
        assert session.chat_id is None
        assert session.session_id == "session_abcdefgh"

    asyncio.run(_run())


def test_exhaustion_raises_when_degraded_mode_is_off() -> None:
    async def _run() -> None:
        platform = FakePlatform(_server_error(), _server_error())

        with pytest.raises(SessionCreationError) as info:
            await create_session_with_retries(
                platform,
                tenant_id="acme",
                max_retries=2,
                retry_delay_s=0.0,
                allow_degraded=False,
            )
        assert info.value.kind == "server"

    asyncio.run(_run())


def test_probe_stops_at_first_ready() -> None:
    async def _run() -> None:
        platform = FakePlatform()

        assert await wait_for_platform_ready(platform, attempts=5, delay_s=0.0) is True
        assert platform.probe_calls == 1

    asyncio.run(_run())


def test_probe_gives_up_without_raising() -> None:
    async def _run() -> None:
        platform = FakePlatform(ready=False)

        assert await wait_for_platform_ready(platform, attempts=3, delay_s=0.0) is False
        assert platform.probe_calls == 3

    asyncio.run(_run())


def test_probe_survives_transport_errors() -> None:
    async def _run() -> None:
        class _Flaky(FakePlatform):
            async def check_ready(self) -> bool:
                self.probe_calls += 1
                if self.probe_calls == 1:
                    raise TransportError("connection refused")
                return True

        platform = _Flaky()

        assert await wait_for_platform_ready(platform, attempts=3, delay_s=0.0) is True
        assert platform.probe_calls == 2

    asyncio.run(_run())
