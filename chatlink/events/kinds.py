"""Closed set of event kinds.

Wire kinds are the canonical inbound frame types after normalization. Local
kinds are lifecycle notifications produced by the client itself and are
never accepted from the wire. Frames whose type is neither are dispatched
under their own snake_case name so new server events reach subscribers
without a client release.
"""

from __future__ import annotations

from enum import Enum


class EventKind(str, Enum):
    # Inbound wire events
    CONNECTION_ESTABLISHED = "connection_established"
    CONNECTION_READY = "connection_ready"
    INITIALIZATION_PROGRESS = "initialization_progress"
    RESPONSE_START = "response_start"
    RESPONSE_CHUNK = "response_chunk"
    RESPONSE_COMPLETE = "response_complete"
    MESSAGE_RECEIVED = "message_received"
    PROCESSING = "processing"
    TYPING_INDICATOR = "typing_indicator"
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    ERROR = "error"
    PING = "ping"

    # Local lifecycle notifications
    STATE_CHANGED = "state_changed"
    RECONNECTING = "reconnecting"
    RECONNECTION_SUCCEEDED = "reconnection_succeeded"
    RECONNECTION_STOPPED = "reconnection_stopped"
    MESSAGE_UPDATED = "message_updated"
    SESSION_ERROR = "session_error"


class OutboundType(str, Enum):
    CHAT_MESSAGE = "chat_message"
    JOIN_CHAT = "join_chat"
    LEAVE_CHAT = "leave_chat"
    TYPING_START = "typing_start"
    TYPING_STOP = "typing_stop"
    PONG = "pong"


LOCAL_KINDS: frozenset[EventKind] = frozenset(
    {
        EventKind.STATE_CHANGED,
        EventKind.RECONNECTING,
        EventKind.RECONNECTION_SUCCEEDED,
        EventKind.RECONNECTION_STOPPED,
        EventKind.MESSAGE_UPDATED,
        EventKind.SESSION_ERROR,
    }
)
WIRE_KINDS: frozenset[EventKind] = frozenset(set(EventKind) - LOCAL_KINDS)


def kind_name(kind: EventKind | str) -> str:
    return kind.value if isinstance(kind, EventKind) else str(kind)


__all__ = ["EventKind", "OutboundType", "LOCAL_KINDS", "WIRE_KINDS", "kind_name"]
