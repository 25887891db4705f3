"""Per-response stream buffer."""

from __future__ import annotations

import time
from typing import Any
from dataclasses import field, dataclass


@dataclass
class StreamBuffer:
    """Accumulates the fragments of one in-flight assistant response.

    Attributes:
        message_id: Server id of the assistant message being streamed.
        chunks: Every fragment received, in arrival order.
        started_at: Monotonic time the stream started.
        expiry_key: Timer key of the expiry handle owned by this buffer.
        flush_key: Timer key of the pending UI flush, if any.
        metadata: Fields from the start frame carried into the final message.
    """

    message_id: str
    expiry_key: str
    flush_key: str
    started_at: float = field(default_factory=time.monotonic)
    chunks: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def content(self) -> str:
        return "".join(self.chunks)


__all__ = ["StreamBuffer"]
