"""Canonical events: kinds, payloads, normalization, dedup and dispatch."""

from .bus import EventBus, Handler
from .dedupe import DedupStats, EventDeduplicator
from .kinds import LOCAL_KINDS, WIRE_KINDS, EventKind, OutboundType, kind_name
from .normalizer import normalize_inbound, normalize_outbound, resolve_kind
from .payloads import (
    ConnectionEstablished,
    ConnectionReady,
    Event,
    InitializationProgress,
    MessageReceived,
    Ping,
    Processing,
    RateLimitExceeded,
    ReconnectAttempt,
    ReconnectionStopped,
    ResponseChunk,
    ResponseComplete,
    ResponseStart,
    ServerError,
    TypingIndicator,
)

__all__ = [
    "EventBus",
    "Handler",
    "DedupStats",
    "EventDeduplicator",
    "EventKind",
    "OutboundType",
    "LOCAL_KINDS",
    "WIRE_KINDS",
    "kind_name",
    "normalize_inbound",
    "normalize_outbound",
    "resolve_kind",
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
