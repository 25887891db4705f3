"""Tagged payload records, one per event kind.

Inbound frames are decoded into these by the normalizer; subscribers can
rely on attribute access instead of probing dictionaries. Unknown kinds keep
a plain ``dict`` payload.
"""

from __future__ import annotations

import time
from typing import Any
from dataclasses import field, dataclass

from chatlink.errors.kinds import ErrorClass

from .kinds import EventKind, kind_name


@dataclass(frozen=True)
class ConnectionEstablished:
    client_id: str | None = None
    tenant_id: str | None = None


@dataclass(frozen=True)
class ConnectionReady:
    client_id: str | None = None
    tenant_id: str | None = None
    message: str | None = None


@dataclass(frozen=True)
class InitializationProgress:
    phase: str | None = None
    message: str | None = None
    progress: float | None = None


@dataclass(frozen=True)
class ResponseStart:
    message_id: str | None = None
    client_message_id: str | None = None


@dataclass(frozen=True)
class ResponseChunk:
    message_id: str | None = None
    content: str = ""
    client_message_id: str | None = None


@dataclass(frozen=True)
class ResponseComplete:
    """Final frame of an assistant response.

    ``content`` is None when the server relies on the streamed chunks.
    """

    message_id: str | None = None
    content: str | None = None
    total_tokens: int | None = None
    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    cost_estimate: float | None = None
    model: str | None = None
    response_time_ms: float | None = None
    sources: list[Any] = field(default_factory=list)
    client_message_id: str | None = None


@dataclass(frozen=True)
class MessageReceived:
    message_id: str | None = None
    client_message_id: str | None = None
    content: str | None = None


@dataclass(frozen=True)
class Processing:
    message_id: str | None = None
    client_message_id: str | None = None


@dataclass(frozen=True)
class TypingIndicator:
    is_typing: bool = False
    user_id: str | None = None


@dataclass(frozen=True)
class RateLimitExceeded:
    retry_after: float | None = None
    message: str | None = None


@dataclass(frozen=True)
class ServerError:
    error_type: str = "error"
    message: str | None = None
    message_id: str | None = None
    client_message_id: str | None = None


@dataclass(frozen=True)
class Ping:
    timestamp: Any = None


@dataclass(frozen=True)
class ReconnectAttempt:
    attempt: int
    max_attempts: int
    delay_s: float
    error_class: ErrorClass | None = None
    close_code: int | None = None


@dataclass(frozen=True)
class ReconnectionStopped:
    reason: str
    attempts: int
    error_class: ErrorClass | None = None


@dataclass(frozen=True)
class Event:
    """A canonical event record.

    Attributes:
        kind: EventKind for known kinds, the snake_case wire name otherwise.
        payload: Tagged payload for the kind (dict for unknown kinds).
        chat_id: Chat the frame refers to, when the server said so.
        event_ts: Timestamp exactly as sent on the wire; None when absent.
        received_at: Local wall-clock time the record was created.
        raw: The original frame, kept for debugging.
    """

    kind: EventKind | str
    payload: Any = None
    chat_id: str | None = None
    event_ts: Any = None
    received_at: float = field(default_factory=time.time)
    raw: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def name(self) -> str:
        return kind_name(self.kind)

    @property
    def is_known(self) -> bool:
        return isinstance(self.kind, EventKind)

    @property
    def message_id(self) -> str | None:
        if isinstance(self.payload, dict):
            value = self.payload.get("message_id")
            return None if value is None else str(value)
        return getattr(self.payload, "message_id", None)

    @property
    def content(self) -> str | None:
        if isinstance(self.payload, dict):
            value = self.payload.get("content")
            return value if isinstance(value, str) else None
        value = getattr(self.payload, "content", None)
        return value if isinstance(value, str) else None


__all__ = [
    "ConnectionEstablished",
    "ConnectionReady",
    "Event",
    "InitializationProgress",
    "MessageReceived",
    "Ping",
    "Processing",
    "RateLimitExceeded",
    "ReconnectAttempt",
    "ReconnectionStopped",
    "ResponseChunk",
    "ResponseComplete",
    "ResponseStart",
    "ServerError",
    "TypingIndicator",
]
