"""Streamed response reassembly.

One buffer per in-flight assistant message, keyed by the server message id:

    start     allocate buffer, arm expiry
    append    add fragment, re-arm expiry, schedule a batched UI flush
    complete  final content (payload, or the buffer when the payload has
              none), metadata, status RECEIVED; buffer and timers released
    expiry    no fragment for ``expiry_s``: message FAILED (stream_timeout)

Fragments arrive far faster than a UI should repaint, so updates go out on
a short debounce (``flush_interval_s``) through ``on_update`` instead of
once per chunk.

A completion with no buffer is the non-streaming path: the message is built
directly from the completion payload.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from chatlink.config.streaming import STREAM_EXPIRY_S, STREAM_FLUSH_INTERVAL_S
from chatlink.events.payloads import ResponseComplete
from chatlink.helpers.ids import new_message_id
from chatlink.helpers.timers import Timers
from chatlink.state.messages import Message, MessageRole, MessageStatus
from chatlink.state.streaming import StreamBuffer

logger = logging.getLogger(__name__)

MessageCallback = Callable[[Message], Any]

STREAM_TIMEOUT_REASON = "stream_timeout"
_TIMER_PREFIX = "stream:"


class StreamAssembler:
    """Buffers fragments per assistant message and emits batched updates."""

    def __init__(
        self,
        *,
        on_update: MessageCallback | None = None,
        on_expired: MessageCallback | None = None,
        expiry_s: float = STREAM_EXPIRY_S,
        flush_interval_s: float = STREAM_FLUSH_INTERVAL_S,
        timers: Timers | None = None,
    ) -> None:
        self._on_update = on_update
        self._on_expired = on_expired
        self.expiry_s = float(expiry_s)
        self.flush_interval_s = float(flush_interval_s)
        self._timers = timers or Timers("streams")
        self._buffers: dict[str, StreamBuffer] = {}
        self._messages: dict[str, Message] = {}

    def has_buffer(self, message_id: str | None) -> bool:
        return bool(message_id) and message_id in self._buffers

    def active_ids(self) -> list[str]:
        return list(self._buffers)

    def buffer(self, message_id: str) -> StreamBuffer | None:
        return self._buffers.get(message_id)

    def message(self, message_id: str) -> Message | None:
        return self._messages.get(message_id)

    def start(self, message_id: str, metadata: dict[str, Any] | None = None) -> Message:
        """Open a buffer for ``message_id``; a repeated start reuses it."""
        existing = self._messages.get(message_id)
        if existing is not None:
            return existing
        buffer = StreamBuffer(
            message_id=message_id,
            expiry_key=f"{_TIMER_PREFIX}{message_id}:expiry",
            flush_key=f"{_TIMER_PREFIX}{message_id}:flush",
            metadata=dict(metadata or {}),
        )
        message = Message(
            id=message_id,
            role=MessageRole.ASSISTANT,
            content="",
            status=MessageStatus.STREAMING,
        )
        self._buffers[message_id] = buffer
        self._messages[message_id] = message
        self._arm_expiry(buffer)
        logger.debug("stream: started %s", message_id)
        return message

    def append(self, message_id: str, content: str) -> Message:
        """Add a fragment. A fragment for an unknown id starts its buffer."""
        if message_id not in self._buffers:
            logger.debug("stream: chunk before start for %s", message_id)
            self.start(message_id)
        buffer = self._buffers[message_id]
        message = self._messages[message_id]
        if content:
            buffer.chunks.append(content)
            message.content = buffer.content
        self._arm_expiry(buffer)
        if not self._timers.pending(buffer.flush_key):
            self._timers.schedule(buffer.flush_key, self.flush_interval_s, lambda: self._flush(message_id))
        return message

    def complete(self, payload: ResponseComplete) -> Message:
        """Finish a stream, or build the message when nothing was streamed."""
        message_id = payload.message_id
        buffer = self._buffers.get(message_id) if message_id else None
        if buffer is None:
            message = Message(
                id=message_id or new_message_id(),
                role=MessageRole.ASSISTANT,
                content=payload.content or "",
                status=MessageStatus.RECEIVED,
            )
            logger.info("stream: completion without buffer for %s; using payload", message.id)
            _apply_completion_metadata(message, payload)
            return message

        self._release(buffer)
        message = self._messages.pop(buffer.message_id)
        message.content = payload.content if payload.content else buffer.content
        message.status = MessageStatus.RECEIVED
        _apply_completion_metadata(message, payload)
        if buffer.metadata:
            message.metadata.extra.update(buffer.metadata)
        logger.debug("stream: completed %s chunks=%d chars=%d", message.id, len(buffer.chunks), len(message.content))
        return message

    def fail(self, message_id: str, reason: str) -> Message | None:
        """Mark a stream FAILED and drop its buffer; None if not streaming."""
        buffer = self._buffers.get(message_id)
        if buffer is None:
            return None
        self._release(buffer)
        message = self._messages.pop(message_id)
        message.status = MessageStatus.FAILED
        message.metadata.error = reason
        logger.warning("stream: %s failed (%s) after %d chunk(s)", message_id, reason, len(buffer.chunks))
        return message

    def discard_all(self) -> list[Message]:
        """Drop every buffer (teardown). Returns the discarded messages."""
        self._timers.cancel_prefix(_TIMER_PREFIX)
        discarded = list(self._messages.values())
        self._buffers.clear()
        self._messages.clear()
        return discarded

    def _release(self, buffer: StreamBuffer) -> None:
        self._timers.cancel(buffer.expiry_key)
        self._timers.cancel(buffer.flush_key)
        del self._buffers[buffer.message_id]

    def _arm_expiry(self, buffer: StreamBuffer) -> None:
        message_id = buffer.message_id
        self._timers.schedule(buffer.expiry_key, self.expiry_s, lambda: self._expire(message_id))

    def _expire(self, message_id: str) -> Any:
        message = self.fail(message_id, STREAM_TIMEOUT_REASON)
        if message is not None and self._on_expired is not None:
            return self._on_expired(message)
        return None

    def _flush(self, message_id: str) -> Any:
        message = self._messages.get(message_id)
        if message is None or self._on_update is None:
            return None
        return self._on_update(message)


def _apply_completion_metadata(message: Message, payload: ResponseComplete) -> None:
    meta = message.metadata
    meta.model = payload.model or meta.model
    meta.total_tokens = payload.total_tokens
    meta.prompt_tokens = payload.prompt_tokens
    meta.completion_tokens = payload.completion_tokens
    meta.cost_estimate = payload.cost_estimate
    meta.response_time_ms = payload.response_time_ms
    meta.sources = list(payload.sources)
    if payload.client_message_id:
        meta.client_message_id = payload.client_message_id


__all__ = ["StreamAssembler", "STREAM_TIMEOUT_REASON"]
