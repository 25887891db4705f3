"""Unrecoverable authentication and configuration failures.

Neither error is retried: reconnecting with the same tenant or token will be
rejected the same way.
"""

from __future__ import annotations

from .base import ChatClientError


class AuthenticationError(ChatClientError):
    """Raised when the server rejects the token or tenant."""

    user_template = "Authentication failed. Please check your credentials."


class ConfigurationError(ChatClientError):
    """Raised when the client is misconfigured (missing tenant, bad URL)."""

    user_template = "Chat is not configured correctly. Please contact support."


__all__ = ["AuthenticationError", "ConfigurationError"]
