"""Malformed wire frames and errors reported by the server in-band."""

from __future__ import annotations

from .base import ChatClientError
from .kinds import ErrorClass


class ProtocolError(ChatClientError):
    """Raised when an inbound frame cannot be parsed into an event."""

    user_template = "Received an unexpected response from the server."


class ServerReportedError(ChatClientError):
    """An ``error`` frame sent by the server over an open socket.

    Attributes:
        error_type: Server error identifier (e.g. ``ai_processing_error``).
        message_id: Message the error refers to, when the server said so.
    """

    user_template = "Something went wrong on our side. Please try again."
    error_class = ErrorClass.SERVER

    def __init__(self, error_type: str, message: str | None = None, *, message_id: str | None = None) -> None:
        super().__init__(message or error_type)
        self.error_type = error_type
        self.message_id = message_id


__all__ = ["ProtocolError", "ServerReportedError"]
