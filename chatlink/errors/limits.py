"""Rate limiting exception with retry metadata."""

from __future__ import annotations

from .base import ChatClientError


class RateLimitError(ChatClientError):
    """Raised when the server reports that the client is sending too fast.

    Attributes:
        retry_in: Seconds until the server accepts traffic again, if known.
    """

    def __init__(self, *, retry_in: float | None = None, message: str | None = None) -> None:
        super().__init__(message or "rate limit exceeded")
        self.retry_in = None if retry_in is None else max(0.0, float(retry_in))

    def format_for_user(self) -> str:
        if self.retry_in:
            return f"Too many messages. Please wait {self.retry_in:.0f} second(s)."
        return "Too many messages. Please slow down."


__all__ = ["RateLimitError"]
