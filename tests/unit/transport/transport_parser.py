"""Unit tests for raw frame decoding."""

from __future__ import annotations

import pytest

from chatlink.errors import ProtocolError
from chatlink.transport import encode_frame, parse_frame


def test_parse_text_and_bytes() -> None:
    assert parse_frame('{"type": "ping"}') == {"type": "ping"}
    assert parse_frame(b'{"type": "ping"}') == {"type": "ping"}


def test_parse_rejects_bad_frames() -> None:
    with pytest.raises(ProtocolError, match="Empty"):
        parse_frame("   ")
    with pytest.raises(ProtocolError, match="valid JSON"):
        parse_frame("{nope")
    with pytest.raises(ProtocolError, match="JSON object"):
        parse_frame("[1, 2]")
    with pytest.raises(ProtocolError, match="UTF-8"):
        parse_frame(b"\xff\xfe")


def test_encode_is_compact() -> None:
    assert encode_frame({"type": "pong", "data": {}}) == '{"type":"pong","data":{}}'
