"""Translation between wire frames and canonical event records.

Inbound:
    Servers have shipped the same concept under several spellings over
    time: camelCase keys, ``event_type``/``eventType`` instead of ``type``,
    payload fields at the top level or nested under ``data`` (and, for
    completions, under ``data.message``), and alias type names such as
    ``chat_response_streaming``. ``normalize_inbound`` collapses all of them
    into one ``Event`` per concept with a tagged payload. Nothing downstream
    of this module sees an alias.

Outbound:
    ``normalize_outbound`` produces ``{type, data, timestamp, client_id}``
    frames with snake_case keys and None values dropped.

Missing ``event_ts`` values are never invented here: the deduplicator keys
on the wire timestamp, and a locally generated one would make identical
replays look distinct. ``Event.received_at`` carries local time instead.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from chatlink.errors import ProtocolError

from .kinds import WIRE_KINDS, EventKind, OutboundType
from .payloads import (
    ConnectionEstablished,
    ConnectionReady,
    Event,
    InitializationProgress,
    MessageReceived,
    Ping,
    Processing,
    RateLimitExceeded,
    ResponseChunk,
    ResponseComplete,
    ResponseStart,
    ServerError,
    TypingIndicator,
)

TYPE_KEYS: tuple[str, ...] = ("type", "event_type", "eventType")

KIND_ALIASES: dict[str, EventKind] = {
    "chat_response_streaming": EventKind.RESPONSE_CHUNK,
    "ai_response_chunk": EventKind.RESPONSE_CHUNK,
    "stream_chunk": EventKind.RESPONSE_CHUNK,
    "chat_response_start": EventKind.RESPONSE_START,
    "ai_response_start": EventKind.RESPONSE_START,
    "chat_response": EventKind.RESPONSE_COMPLETE,
    "chat_response_complete": EventKind.RESPONSE_COMPLETE,
    "ai_response_complete": EventKind.RESPONSE_COMPLETE,
    "ai_processing_started": EventKind.PROCESSING,
    "message_processing": EventKind.PROCESSING,
    "message_ack": EventKind.MESSAGE_RECEIVED,
    "typing_start": EventKind.TYPING_INDICATOR,
    "typing_stop": EventKind.TYPING_INDICATOR,
    "platform_initializing": EventKind.INITIALIZATION_PROGRESS,
    "ai_services_loading": EventKind.INITIALIZATION_PROGRESS,
    "platform_ready": EventKind.CONNECTION_READY,
    "rate_limit_error": EventKind.RATE_LIMIT_EXCEEDED,
    "rate_limited": EventKind.RATE_LIMIT_EXCEEDED,
    "heartbeat": EventKind.PING,
}

_RATE_LIMIT_ERROR_TYPES = frozenset({"rate_limit_error", "rate_limit_exceeded", "rate_limited"})
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def to_snake(name: str) -> str:
    """``responseTimeMs`` -> ``response_time_ms``; snake_case passes through."""
    return _CAMEL_BOUNDARY.sub("_", name).replace("-", "_").lower()


def snake_keys(value: Any) -> Any:
    """Recursively snake_case mapping keys."""
    if isinstance(value, Mapping):
        return {to_snake(str(k)): snake_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [snake_keys(v) for v in value]
    return value


def resolve_kind(raw_type: str) -> EventKind | str:
    """Map a wire type name to its canonical kind.

    Local lifecycle kinds are never produced from the wire; a frame claiming
    one is dispatched under its raw name like any other unknown type.
    """
    name = to_snake(raw_type.strip())
    alias = KIND_ALIASES.get(name)
    if alias is not None:
        return alias
    try:
        kind = EventKind(name)
    except ValueError:
        return name
    return kind if kind in WIRE_KINDS else name


def _raw_type(frame: Mapping[str, Any]) -> str:
    for key in TYPE_KEYS:
        value = frame.get(key)
        if isinstance(value, str) and value.strip():
            return value
    raise ProtocolError("frame has no type field")


def _as_str(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value or None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _as_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_content(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _body(frame: Mapping[str, Any]) -> dict[str, Any]:
    """Merge top-level fields with ``data`` (``data`` wins), snake_cased."""
    body: dict[str, Any] = {}
    for key, value in frame.items():
        if key in TYPE_KEYS or key == "data":
            continue
        body[to_snake(str(key))] = snake_keys(value)
    data = frame.get("data")
    if isinstance(data, Mapping):
        body.update(snake_keys(data))
    return body


def _flatten_message(body: dict[str, Any]) -> dict[str, Any]:
    """Lift ``message: {...}`` fields into the body without overwriting."""
    nested = body.get("message")
    if not isinstance(nested, Mapping):
        return body
    merged = dict(body)
    merged.pop("message")
    for key, value in nested.items():
        if key == "id":
            merged.setdefault("message_id", value)
        else:
            merged.setdefault(key, value)
    return merged


def _message_id(body: Mapping[str, Any]) -> str | None:
    return _as_str(body.get("message_id")) or _as_str(body.get("id"))


def _client_message_id(body: Mapping[str, Any]) -> str | None:
    return _as_str(body.get("client_message_id")) or _as_str(body.get("temp_id"))


def _build_payload(kind: EventKind | str, wire_name: str, body: dict[str, Any]) -> Any:
    if kind is EventKind.CONNECTION_ESTABLISHED:
        return ConnectionEstablished(
            client_id=_as_str(body.get("client_id")),
            tenant_id=_as_str(body.get("tenant_id")),
        )
    if kind is EventKind.CONNECTION_READY:
        return ConnectionReady(
            client_id=_as_str(body.get("client_id")),
            tenant_id=_as_str(body.get("tenant_id")),
            message=_as_str(body.get("message")),
        )
    if kind is EventKind.INITIALIZATION_PROGRESS:
        phase = _as_str(body.get("phase")) or _as_str(body.get("status"))
        if phase is None and wire_name != EventKind.INITIALIZATION_PROGRESS.value:
            phase = wire_name
        return InitializationProgress(
            phase=phase,
            message=_as_str(body.get("message")),
            progress=_as_float(body.get("progress")),
        )
    if kind is EventKind.RESPONSE_START:
        body = _flatten_message(body)
        return ResponseStart(message_id=_message_id(body), client_message_id=_client_message_id(body))
    if kind is EventKind.RESPONSE_CHUNK:
        body = _flatten_message(body)
        return ResponseChunk(
            message_id=_message_id(body),
            content=_as_content(body.get("content")) or _as_content(body.get("chunk")) or "",
            client_message_id=_client_message_id(body),
        )
    if kind is EventKind.RESPONSE_COMPLETE:
        body = _flatten_message(body)
        sources = body.get("sources")
        return ResponseComplete(
            message_id=_message_id(body),
            content=_as_content(body.get("content")),
            total_tokens=_as_int(body.get("total_tokens")),
            prompt_tokens=_as_int(body.get("prompt_tokens")),
            completion_tokens=_as_int(body.get("completion_tokens")),
            cost_estimate=_as_float(body.get("cost_estimate")),
            model=_as_str(body.get("model")),
            response_time_ms=_as_float(body.get("response_time_ms")),
            sources=list(sources) if isinstance(sources, list) else [],
            client_message_id=_client_message_id(body),
        )
    if kind is EventKind.MESSAGE_RECEIVED:
        body = _flatten_message(body)
        return MessageReceived(
            message_id=_message_id(body),
            client_message_id=_client_message_id(body),
            content=_as_content(body.get("content")),
        )
    if kind is EventKind.PROCESSING:
        return Processing(message_id=_message_id(body), client_message_id=_client_message_id(body))
    if kind is EventKind.TYPING_INDICATOR:
        if wire_name in ("typing_start", "typing_stop"):
            is_typing = wire_name == "typing_start"
        else:
            is_typing = bool(body.get("is_typing", body.get("typing", False)))
        return TypingIndicator(is_typing=is_typing, user_id=_as_str(body.get("user_id")))
    if kind is EventKind.RATE_LIMIT_EXCEEDED:
        retry_after = _as_float(body.get("retry_after"))
        if retry_after is None:
            retry_after = _as_float(body.get("retry_in"))
        return RateLimitExceeded(retry_after=retry_after, message=_as_str(body.get("message")))
    if kind is EventKind.ERROR:
        return ServerError(
            error_type=_as_str(body.get("error_type")) or _as_str(body.get("type")) or _as_str(body.get("code")) or "error",
            message=_as_str(body.get("message")) or _as_str(body.get("error")),
            message_id=_message_id(body),
            client_message_id=_client_message_id(body),
        )
    if kind is EventKind.PING:
        return Ping(timestamp=body.get("timestamp", body.get("event_ts")))
    return body


def normalize_inbound(frame: Mapping[str, Any]) -> Event:
    """Convert a decoded wire frame into an Event.

    Raises:
        ProtocolError: The frame is not a mapping or has no type.
    """
    if not isinstance(frame, Mapping):
        raise ProtocolError("frame must be a JSON object")
    wire_name = to_snake(_raw_type(frame).strip())
    kind = resolve_kind(wire_name)
    body = _body(frame)

    if kind is EventKind.ERROR:
        error_type = _as_str(body.get("error_type")) or _as_str(body.get("type"))
        if error_type in _RATE_LIMIT_ERROR_TYPES:
            kind = EventKind.RATE_LIMIT_EXCEEDED

    payload = _build_payload(kind, wire_name, body)
    event_ts = body.get("event_ts")
    if event_ts is None:
        event_ts = body.get("timestamp")
    return Event(
        kind=kind,
        payload=payload,
        chat_id=_as_str(body.get("chat_id")),
        event_ts=event_ts,
        raw=dict(frame),
    )


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def normalize_outbound(
    frame_type: OutboundType | str,
    data: Mapping[str, Any] | None = None,
    *,
    client_id: str | None = None,
    timestamp: str | None = None,
) -> dict[str, Any]:
    """Build an outbound frame in the shape the server expects."""
    type_name = frame_type.value if isinstance(frame_type, OutboundType) else to_snake(str(frame_type))
    if not type_name:
        raise ProtocolError("outbound frame needs a type")
    body = {k: v for k, v in snake_keys(dict(data or {})).items() if v is not None}
    frame: dict[str, Any] = {
        "type": type_name,
        "data": body,
        "timestamp": timestamp or _utc_timestamp(),
    }
    if client_id:
        frame["client_id"] = client_id
    return frame


__all__ = [
    "KIND_ALIASES",
    "TYPE_KEYS",
    "normalize_inbound",
    "normalize_outbound",
    "resolve_kind",
    "snake_keys",
    "to_snake",
]
