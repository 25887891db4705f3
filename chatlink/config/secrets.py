"""Credentials read from the environment only."""

from __future__ import annotations

import os

CHAT_AUTH_TOKEN = os.getenv("CHAT_AUTH_TOKEN") or None
CHAT_API_KEY = os.getenv("CHAT_API_KEY") or None

__all__ = ["CHAT_AUTH_TOKEN", "CHAT_API_KEY"]
