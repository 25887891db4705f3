"""Logging context helpers for consistent structured fields.

Every record emitted while a chat, message or client id is bound carries it
as ``chat_id``, ``message_id`` and ``client_id`` attributes, so the default
format can show which conversation a reconnect or timeout belongs to.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

_CHAT_ID: ContextVar[str] = ContextVar("chat_id", default="-")
_MESSAGE_ID: ContextVar[str] = ContextVar("message_id", default="-")
_CLIENT_ID: ContextVar[str] = ContextVar("client_id", default="-")


def set_log_context(
    *,
    chat_id: str | None = None,
    message_id: str | None = None,
    client_id: str | None = None,
) -> list[tuple[ContextVar[str], object]]:
    """Set log context values and return tokens for reset."""
    tokens: list[tuple[ContextVar[str], object]] = []
    if chat_id is not None:
        tokens.append((_CHAT_ID, _CHAT_ID.set(chat_id)))
    if message_id is not None:
        tokens.append((_MESSAGE_ID, _MESSAGE_ID.set(message_id)))
    if client_id is not None:
        tokens.append((_CLIENT_ID, _CLIENT_ID.set(client_id)))
    return tokens


def reset_log_context(tokens: list[tuple[ContextVar[str], object]]) -> None:
    """Reset log context values using tokens returned by set_log_context."""
    for var, token in reversed(tokens):
        var.reset(token)


@contextmanager
def log_context(
    *,
    chat_id: str | None = None,
    message_id: str | None = None,
    client_id: str | None = None,
) -> Iterator[None]:
    """Context manager for applying log fields within a block."""
    tokens = set_log_context(chat_id=chat_id, message_id=message_id, client_id=client_id)
    try:
        yield
    finally:
        reset_log_context(tokens)


def current_log_context() -> dict[str, str]:
    return {
        "chat_id": _CHAT_ID.get(),
        "message_id": _MESSAGE_ID.get(),
        "client_id": _CLIENT_ID.get(),
    }


def install_log_context() -> None:
    """Install a LogRecord factory that injects context fields."""
    if getattr(install_log_context, "_installed", False):
        return

    old_factory = logging.getLogRecordFactory()

    def record_factory(*args, **kwargs):
        record = old_factory(*args, **kwargs)
        record.chat_id = _CHAT_ID.get()
        record.message_id = _MESSAGE_ID.get()
        record.client_id = _CLIENT_ID.get()
        return record

    logging.setLogRecordFactory(record_factory)
    install_log_context._installed = True  # type: ignore[attr-defined]


__all__ = [
    "current_log_context",
    "install_log_context",
    "log_context",
    "reset_log_context",
    "set_log_context",
]
