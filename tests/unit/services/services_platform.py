"""Unit tests for the platform REST client using httpx.MockTransport."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable

import httpx
import pytest

from chatlink.errors import SessionCreationError, TransportError, ValidationError
from chatlink.services import PlatformClient

SESSION_ID = "session_1234abcd"


def _client(handler: Callable[[httpx.Request], httpx.Response], **kwargs) -> PlatformClient:
    return PlatformClient(
        base_url="http://platform.test/",
        tenant_id="acme",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


async def _create(client: PlatformClient) -> str:
    async with client:
        return await client.create_chat(session_id=SESSION_ID, visitor_id="visitor_1", title="Support")


def test_check_ready_reads_health_body() -> None:
    async def _run() -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"status": "degraded", "ai_services_ready": True})

        async with _client(handler, api_key="secret") as client:
            assert await client.check_ready() is True

        assert seen[0].url.path == "/api/v1/health"
        assert seen[0].headers["X-Tenant-ID"] == "acme"
        assert seen[0].headers["Authorization"] == "Bearer secret"

    asyncio.run(_run())


def test_check_ready_is_false_for_unhealthy_responses() -> None:
    async def _run() -> None:
        responses = [
            httpx.Response(503, json={"status": "starting"}),
            httpx.Response(200, json={"status": "starting", "ai_services_ready": False}),
            httpx.Response(200, text="ok"),
        ]
        for response in responses:
            async with _client(lambda request, r=response: r) as client:
                assert await client.check_ready() is False

    asyncio.run(_run())


def test_check_ready_raises_transport_error_when_unreachable() -> None:
    async def _run() -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(TransportError, match="health probe failed"):
                await client.check_ready()

    asyncio.run(_run())


def test_create_chat_posts_identity_and_reads_id() -> None:
    async def _run() -> None:
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(201, json={"data": {"id": 42}})

        chat_id = await _create(_client(handler))

        assert chat_id == "42"
        assert bodies == [
            {"session_id": SESSION_ID, "visitor_id": "visitor_1", "title": "Support", "tenant_id": "acme"}
        ]

    asyncio.run(_run())


def test_create_chat_maps_http_failures() -> None:
    async def _run() -> None:
        cases = [
            (httpx.Response(500), "server", True),
            (httpx.Response(502), "server", True),
            (httpx.Response(429), "rate_limit", True),
            (httpx.Response(401), "auth", False),
            (httpx.Response(403), "auth", False),
            (httpx.Response(422, json={"detail": "bad"}), "client", False),
            (httpx.Response(200, text="<html>"), "schema", True),
            (httpx.Response(200, json={"ok": True}), "schema", True),
        ]
        for response, kind, retryable in cases:
            with pytest.raises(SessionCreationError) as info:
                await _create(_client(lambda request, r=response: r))
            assert info.value.kind == kind
            assert info.value.retryable is retryable
            assert info.value.status_code == response.status_code

    asyncio.run(_run())


def test_create_chat_network_failure_is_retryable() -> None:
    async def _run() -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("boom", request=request)

        with pytest.raises(SessionCreationError) as info:
            await _create(_client(handler))

        assert info.value.kind == "network"
        assert info.value.retryable is True
        assert info.value.status_code is None

    asyncio.run(_run())


def test_create_chat_rejects_malformed_session_id() -> None:
    async def _run() -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(201, json={"chat_id": "c1"})

        async with _client(handler) as client:
            with pytest.raises(ValidationError) as info:
                await client.create_chat(session_id="bad id!", visitor_id="v")

        assert info.value.error_code == "invalid_session_id"
        assert calls == []

    asyncio.run(_run())
