"""Raw frame decoding for the inbound pipeline."""

from __future__ import annotations

import json
from typing import Any

from chatlink.errors import ProtocolError


def parse_frame(raw: str | bytes) -> dict[str, Any]:
    """Decode one text frame into a JSON object.

    Raises:
        ProtocolError: Empty, non-JSON or non-object frames.
    """
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ProtocolError("Frame is not valid UTF-8.") from exc

    text = (raw or "").strip()
    if not text:
        raise ProtocolError("Empty frame.")

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ProtocolError("Frame must be valid JSON.") from exc

    if not isinstance(data, dict):
        raise ProtocolError("Frame must be a JSON object.")
    return data


def encode_frame(frame: dict[str, Any]) -> str:
    return json.dumps(frame, separators=(",", ":"), default=str)


__all__ = ["encode_frame", "parse_frame"]
