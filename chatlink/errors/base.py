"""Base exception for the chat client."""

from __future__ import annotations


class ChatClientError(Exception):
    """Base class for every error raised by chatlink.

    Subclasses override ``user_template`` to control the text shown to end
    users; raw exception strings never reach the UI.
    """

    user_template = "Something went wrong. Please try again."

    def format_for_user(self) -> str:
        return self.user_template


__all__ = ["ChatClientError"]
