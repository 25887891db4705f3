"""Network and transport failures.

These errors never reach callers directly during normal operation; the
connection manager converts them into reconnection attempts and state
changes. They escape only once the retry budget is spent.
"""

from __future__ import annotations

from .base import ChatClientError
from .kinds import ErrorClass


class TransportError(ChatClientError):
    """Raised when the socket cannot be opened or written to."""

    user_template = "Connection problem. Reconnecting..."

    def __init__(self, message: str = "transport failure", *, error_class: ErrorClass | None = None) -> None:
        super().__init__(message)
        self.error_class = error_class or ErrorClass.NETWORK


class ConnectionClosedError(TransportError):
    """Raised when the WebSocket closes underneath an operation."""

    def __init__(
        self,
        message: str = "WebSocket connection closed",
        *,
        close_code: int | None = None,
        close_reason: str | None = None,
        error_class: ErrorClass | None = None,
    ) -> None:
        self.close_code = close_code
        self.close_reason = close_reason
        parts = [message]
        if close_code is not None:
            parts.append(f"code={close_code}")
        if close_reason:
            parts.append(f"reason={close_reason}")
        super().__init__(" ".join(parts), error_class=error_class)


class ConnectionNotReadyError(ChatClientError):
    """Raised when a send is attempted before the server signalled ready."""

    user_template = "Still connecting. Please wait a moment."

    def __init__(self, state: str) -> None:
        super().__init__(f"connection not ready (state={state})")
        self.state = state


__all__ = ["TransportError", "ConnectionClosedError", "ConnectionNotReadyError"]
