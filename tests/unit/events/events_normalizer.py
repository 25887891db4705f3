"""Unit tests for inbound and outbound frame normalization."""

from __future__ import annotations

import pytest

from chatlink.errors import ProtocolError
from chatlink.events import (
    EventKind,
    OutboundType,
    RateLimitExceeded,
    ResponseChunk,
    ResponseComplete,
    TypingIndicator,
    normalize_inbound,
    normalize_outbound,
    resolve_kind,
)


def test_alias_type_key_and_camel_case_fields_collapse() -> None:
    event = normalize_inbound(
        {"eventType": "chat_response_streaming", "data": {"messageId": "m1", "content": "Hel"}}
    )

    assert event.kind is EventKind.RESPONSE_CHUNK
    assert event.payload == ResponseChunk(message_id="m1", content="Hel")


def test_completion_nested_under_message_is_flattened() -> None:
    event = normalize_inbound(
        {
            "type": "chat_response",
            "chatId": "chat_1",
            "data": {"message": {"id": "m2", "content": "Hi", "totalTokens": 5, "responseTimeMs": 120}},
        }
    )

    assert event.kind is EventKind.RESPONSE_COMPLETE
    assert isinstance(event.payload, ResponseComplete)
    assert event.payload.message_id == "m2"
    assert event.payload.content == "Hi"
    assert event.payload.total_tokens == 5
    assert event.payload.response_time_ms == 120.0
    assert event.chat_id == "chat_1"


def test_completion_without_content_keeps_none() -> None:
    event = normalize_inbound({"type": "ai_response_complete", "data": {"message_id": "m3"}})

    assert event.payload.content is None


def test_rate_limit_error_frame_becomes_rate_limit_kind() -> None:
    event = normalize_inbound({"type": "error", "data": {"error_type": "rate_limit_error", "retry_after": 3}})

    assert event.kind is EventKind.RATE_LIMIT_EXCEEDED
    assert event.payload == RateLimitExceeded(retry_after=3.0)


def test_typing_aliases_carry_direction() -> None:
    start = normalize_inbound({"type": "typing_start", "data": {"user_id": "agent"}})
    stop = normalize_inbound({"type": "typing_stop"})

    assert start.payload == TypingIndicator(is_typing=True, user_id="agent")
    assert stop.payload == TypingIndicator(is_typing=False)


def test_unknown_kind_is_kept_under_its_snake_case_name() -> None:
    event = normalize_inbound({"type": "fancyThing", "data": {"someValue": 1}})

    assert event.kind == "fancy_thing"
    assert not event.is_known
    assert event.payload == {"some_value": 1}


def test_local_kind_from_the_wire_is_not_trusted() -> None:
    assert resolve_kind("state_changed") == "state_changed"
    assert resolve_kind("message_updated") == "message_updated"
    assert resolve_kind("platformReady") is EventKind.CONNECTION_READY


def test_event_ts_comes_from_the_wire_only() -> None:
    with_ts = normalize_inbound({"type": "processing", "timestamp": "2024-01-01T00:00:00Z"})
    without_ts = normalize_inbound({"type": "processing"})

    assert with_ts.event_ts == "2024-01-01T00:00:00Z"
    assert without_ts.event_ts is None


def test_frames_without_type_or_not_mappings_raise() -> None:
    with pytest.raises(ProtocolError, match="no type"):
        normalize_inbound({"data": {}})
    with pytest.raises(ProtocolError, match="JSON object"):
        normalize_inbound(["not", "a", "frame"])  # type: ignore[arg-type]


def test_outbound_frame_shape() -> None:
    frame = normalize_outbound(
        OutboundType.CHAT_MESSAGE,
        {"content": "hi", "clientMessageId": "temp_1", "metadata": None},
        client_id="client_1",
        timestamp="2024-01-01T00:00:00Z",
    )

    assert frame == {
        "type": "chat_message",
        "data": {"content": "hi", "client_message_id": "temp_1"},
        "timestamp": "2024-01-01T00:00:00Z",
        "client_id": "client_1",
    }


def test_outbound_frame_omits_missing_client_id() -> None:
    frame = normalize_outbound("pong", {"timestamp": 5})

    assert frame["type"] == "pong"
    assert frame["data"] == {"timestamp": 5}
    assert "client_id" not in frame
