"""Platform readiness polling and chat-session creation with retries.

Both steps run before the socket opens:

1. ``wait_for_platform_ready`` polls the health probe a fixed number of
   times. A platform that never confirms is not fatal; the connection
   attempt that follows has its own readiness handshake.
2. ``create_session_with_retries`` asks the session service for a chat id.
   Retryable failures (server, schema, network, rate limit) are retried up
   to ``max_retries`` attempts in total; anything else raises immediately.
   When every attempt fails the caller either gets a degraded session
   (no chat id, tenant-only socket) or the last error.
"""

from __future__ import annotations

import asyncio
import logging

from chatlink.config.session import (
    READINESS_PROBE_ATTEMPTS,
    READINESS_PROBE_DELAY_S,
    SESSION_CREATE_MAX_RETRIES,
    SESSION_CREATE_RETRY_DELAY_S,
    SESSION_TITLE,
)
from chatlink.errors import ChatClientError, SessionCreationError
from chatlink.helpers.ids import new_session_id, new_visitor_id
from chatlink.services.platform import PlatformService
from chatlink.state.session import ChatSession

logger = logging.getLogger(__name__)


async def wait_for_platform_ready(
    platform: PlatformService,
    *,
    attempts: int = READINESS_PROBE_ATTEMPTS,
    delay_s: float = READINESS_PROBE_DELAY_S,
) -> bool:
    """Poll the health probe; True once it reports ready."""
    for attempt in range(1, max(1, attempts) + 1):
        try:
            if await platform.check_ready():
                logger.info("session: platform ready after %d probe(s)", attempt)
                return True
            logger.debug("session: platform not ready (probe %d/%d)", attempt, attempts)
        except ChatClientError as exc:
            logger.warning("session: readiness probe %d/%d failed: %s", attempt, attempts, exc)
        if attempt < attempts:
            await asyncio.sleep(delay_s)
    logger.warning("session: platform readiness unconfirmed after %d probe(s); continuing", attempts)
    return False


async def create_session_with_retries(
    platform: PlatformService,
    *,
    tenant_id: str,
    session_id: str | None = None,
    visitor_id: str | None = None,
    title: str = SESSION_TITLE,
    max_retries: int = SESSION_CREATE_MAX_RETRIES,
    retry_delay_s: float = SESSION_CREATE_RETRY_DELAY_S,
    allow_degraded: bool = True,
) -> ChatSession:
    """Create a chat session, falling back to degraded mode when allowed.

    Raises:
        SessionCreationError: A non-retryable failure, or every attempt
            failed and degraded mode is not allowed.
        ValidationError: ``session_id`` is malformed.
    """
    session_id = session_id or new_session_id()
    visitor_id = visitor_id or new_visitor_id()
    attempts = max(1, max_retries)
    last_error: SessionCreationError | None = None

    for attempt in range(1, attempts + 1):
        try:
            chat_id = await platform.create_chat(session_id=session_id, visitor_id=visitor_id, title=title)
        except SessionCreationError as exc:
            last_error = exc
            if not exc.retryable:
                logger.error(
                    "session: creation failed kind=%s status=%s (not retryable): %s",
                    exc.kind,
                    exc.status_code,
                    exc,
                )
                raise
            logger.warning(
                "session: creation attempt %d/%d failed kind=%s status=%s: %s",
                attempt,
                attempts,
                exc.kind,
                exc.status_code,
                exc,
            )
            if attempt < attempts:
                await asyncio.sleep(retry_delay_s * attempt)
            continue
        logger.info("session: created chat=%s on attempt %d", chat_id, attempt)
        return ChatSession(
            chat_id=chat_id,
            tenant_id=tenant_id,
            session_id=session_id,
            visitor_id=visitor_id,
            title=title,
        )

    if not allow_degraded and last_error is not None:
        raise last_error
    logger.warning("session: creation exhausted %d attempt(s); continuing in degraded mode", attempts)
    return ChatSession(
        chat_id=None,
        tenant_id=tenant_id,
        degraded=True,
        session_id=session_id,
        visitor_id=visitor_id,
        title=title,
    )


__all__ = ["create_session_with_retries", "wait_for_platform_ready"]
