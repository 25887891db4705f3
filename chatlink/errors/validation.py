"""Input validation exceptions with structured error codes."""

from __future__ import annotations

from .base import ChatClientError


class ValidationError(ChatClientError):
    """Structured validation failure with error code metadata.

    Attributes:
        error_code: Machine-parseable error identifier.
        message: Human-readable error description.
    """

    _USER_TEMPLATES = {
        "empty_message": "Please enter a message.",
        "message_too_long": "Your message is too long.",
        "no_active_session": "Chat is not connected yet.",
        "message_not_retryable": "Only failed messages can be retried.",
    }

    def __init__(self, error_code: str, message: str) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.message = message

    def format_for_user(self) -> str:
        return self._USER_TEMPLATES.get(self.error_code, "Your message could not be sent.")


__all__ = ["ValidationError"]
