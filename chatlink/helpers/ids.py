"""Identifier generation for client-side records."""

from __future__ import annotations

import re
import time
import uuid

SESSION_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{8,100}$")


def _stamp(prefix: str) -> str:
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"


def new_temp_id() -> str:
    """Temporary id for an outbound message awaiting reconciliation."""
    return _stamp("temp")


def new_message_id() -> str:
    """Fallback id for an assistant message the server sent without one."""
    return _stamp("msg")


def new_session_id() -> str:
    return _stamp("session")


def new_visitor_id() -> str:
    return _stamp("visitor")


def is_valid_session_id(value: str | None) -> bool:
    return bool(value) and SESSION_ID_PATTERN.match(value) is not None


__all__ = [
    "SESSION_ID_PATTERN",
    "is_valid_session_id",
    "new_message_id",
    "new_session_id",
    "new_temp_id",
    "new_visitor_id",
]
