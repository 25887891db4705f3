"""HTTP client for the chat platform's session service and health probe.

Two calls are made during initialization:

    GET  {api}/api/v1/health   readiness of the AI services
    POST {api}/api/v1/chat     issue a chat id for this conversation

Both carry the tenant in the ``X-Tenant-ID`` header. Failures of the
creation call are mapped onto ``SessionCreationError`` with a ``kind`` and a
``retryable`` flag so the caller can decide whether to try again:

    network error / timeout   network     retryable
    HTTP 5xx                  server      retryable
    HTTP 429                  rate_limit  retryable
    unusable 2xx body         schema      retryable
    HTTP 401/403              auth        not retryable
    other HTTP 4xx            client      not retryable
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from chatlink.config.platform import (
    CHAT_API_BASE_URL,
    CHAT_API_HEALTH_PATH,
    CHAT_API_CREATE_PATH,
    CHAT_API_TIMEOUT_S,
    CHAT_API_TENANT_HEADER,
)
from chatlink.config.secrets import CHAT_API_KEY
from chatlink.config.session import SESSION_TITLE
from chatlink.config.websocket import CHAT_TENANT_ID
from chatlink.errors import SessionCreationError, TransportError, ValidationError
from chatlink.helpers.ids import is_valid_session_id

logger = logging.getLogger(__name__)


class PlatformService(Protocol):
    """What the session coordinator needs from the platform."""

    async def check_ready(self) -> bool: ...

    async def create_chat(
        self,
        *,
        session_id: str,
        visitor_id: str,
        title: str = SESSION_TITLE,
    ) -> str: ...


def _extract_chat_id(body: Any) -> str | None:
    if not isinstance(body, dict):
        return None
    for source in (body, body.get("data")):
        if not isinstance(source, dict):
            continue
        value = source.get("chat_id") or source.get("id")
        if isinstance(value, (str, int)) and not isinstance(value, bool) and str(value):
            return str(value)
    return None


class PlatformClient:
    """``httpx.AsyncClient`` wrapper for the platform REST endpoints."""

    def __init__(
        self,
        *,
        base_url: str = CHAT_API_BASE_URL,
        tenant_id: str = CHAT_TENANT_ID,
        api_key: str | None = CHAT_API_KEY,
        timeout_s: float = CHAT_API_TIMEOUT_S,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.tenant_id = tenant_id
        headers = {CHAT_API_TENANT_HEADER: tenant_id, "Accept": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout_s,
            transport=transport,
            trust_env=False,
        )

    async def __aenter__(self) -> PlatformClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def check_ready(self) -> bool:
        """Return True when the platform reports its AI services ready.

        Raises:
            TransportError: The probe could not reach the platform.
        """
        try:
            resp = await self._client.get(CHAT_API_HEALTH_PATH)
        except httpx.RequestError as exc:
            raise TransportError(f"health probe failed: {exc}") from exc
        if resp.status_code != 200:
            logger.debug("platform: health probe returned HTTP %d", resp.status_code)
            return False
        try:
            body = resp.json()
        except ValueError:
            logger.debug("platform: health probe returned non-JSON body")
            return False
        if not isinstance(body, dict):
            return False
        return bool(body.get("ai_services_ready")) or body.get("status") == "healthy"

    async def create_chat(
        self,
        *,
        session_id: str,
        visitor_id: str,
        title: str = SESSION_TITLE,
    ) -> str:
        """Ask the session service for a chat id.

        Raises:
            ValidationError: ``session_id`` is malformed.
            SessionCreationError: The request failed (see module docstring).
        """
        if not is_valid_session_id(session_id):
            raise ValidationError(
                "invalid_session_id",
                "session_id must be 8-100 characters of letters, digits, '_' or '-'",
            )
        payload = {
            "session_id": session_id,
            "visitor_id": visitor_id,
            "title": title,
            "tenant_id": self.tenant_id,
        }
        try:
            resp = await self._client.post(CHAT_API_CREATE_PATH, json=payload)
        except httpx.RequestError as exc:
            raise SessionCreationError(f"session service unreachable: {exc}", kind="network", retryable=True) from exc

        status = resp.status_code
        if status >= 500:
            raise SessionCreationError(f"session service error HTTP {status}", kind="server", status_code=status, retryable=True)
        if status == 429:
            raise SessionCreationError("session service rate limited", kind="rate_limit", status_code=status, retryable=True)
        if status in (401, 403):
            raise SessionCreationError(f"session service rejected credentials HTTP {status}", kind="auth", status_code=status)
        if status >= 400:
            raise SessionCreationError(f"session service rejected request HTTP {status}", kind="client", status_code=status)

        try:
            body = resp.json()
        except ValueError as exc:
            raise SessionCreationError("session service returned non-JSON body", kind="schema", status_code=status, retryable=True) from exc
        chat_id = _extract_chat_id(body)
        if chat_id is None:
            raise SessionCreationError("session service response has no chat id", kind="schema", status_code=status, retryable=True)
        return chat_id


__all__ = ["PlatformClient", "PlatformService"]
