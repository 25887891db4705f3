"""Timeout failures for readiness, sends and streams."""

from __future__ import annotations

from .base import ChatClientError


class ChatTimeoutError(ChatClientError, TimeoutError):
    """Base class for chatlink timeouts."""

    user_template = "The server took too long to respond."

    def __init__(self, message: str, *, timeout_s: float | None = None) -> None:
        super().__init__(message)
        self.timeout_s = timeout_s


class ReadyTimeoutError(ChatTimeoutError):
    """Raised when the server never signals ready after connecting."""

    user_template = "Chat is taking too long to start. Please try again."


class MessageTimeoutError(ChatTimeoutError):
    """Recorded on a message that was never acknowledged."""

    user_template = "Message not delivered. Tap to retry."


class StreamTimeoutError(ChatTimeoutError):
    """Recorded on a streamed response that stopped before completing."""

    user_template = "The response was interrupted. Please try again."


__all__ = [
    "ChatTimeoutError",
    "ReadyTimeoutError",
    "MessageTimeoutError",
    "StreamTimeoutError",
]
