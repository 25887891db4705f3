"""Chat session creation and teardown errors."""

from __future__ import annotations

from .base import ChatClientError


class SessionCreationError(ChatClientError):
    """Raised when the session service fails to issue a chat id.

    Attributes:
        kind: ``"server"``, ``"schema"``, ``"network"``, ``"rate_limit"``,
            ``"auth"`` or ``"client"``.
        status_code: HTTP status when one was received.
        retryable: Whether another attempt may succeed.
    """

    user_template = "Could not start a chat session. Please try again."

    def __init__(
        self,
        message: str,
        *,
        kind: str,
        status_code: int | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code
        self.retryable = retryable


class SessionClosedError(ChatClientError):
    """Raised to in-flight operations when the session is torn down."""

    user_template = "Chat was closed."


__all__ = ["SessionCreationError", "SessionClosedError"]
