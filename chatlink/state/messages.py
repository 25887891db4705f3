"""Conversation message records shown to the caller."""

from __future__ import annotations

import time
from enum import Enum
from typing import Any
from dataclasses import field, dataclass


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class MessageStatus(str, Enum):
    SENDING = "sending"
    SENT = "sent"
    DELIVERED = "delivered"
    STREAMING = "streaming"
    RECEIVED = "received"
    FAILED = "failed"


@dataclass
class MessageMetadata:
    """Server-reported details attached once a message settles.

    ``error`` holds a machine-readable failure reason such as
    ``message_timeout`` or ``stream_timeout``.
    """

    model: str | None = None
    total_tokens: int | None = None
    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    cost_estimate: float | None = None
    response_time_ms: float | None = None
    sources: list[Any] = field(default_factory=list)
    client_message_id: str | None = None
    error: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class Message:
    """A single chat message.

    ``id`` is a client-generated temporary id for user messages until the
    server confirms its own id; assistant messages use the server id.
    """

    id: str | None
    role: MessageRole
    content: str
    status: MessageStatus
    timestamp: float = field(default_factory=time.time)
    metadata: MessageMetadata = field(default_factory=MessageMetadata)

    @property
    def is_failed(self) -> bool:
        return self.status is MessageStatus.FAILED


__all__ = ["Message", "MessageMetadata", "MessageRole", "MessageStatus"]
