"""Typing indicator throttling configuration."""

from __future__ import annotations

import os

TYPING_START_INTERVAL_S = float(os.getenv("TYPING_START_INTERVAL_S", "2.0"))
TYPING_STOP_INTERVAL_S = float(os.getenv("TYPING_STOP_INTERVAL_S", "2.0"))
TYPING_STOP_DELAY_S = float(os.getenv("TYPING_STOP_DELAY_S", "1.0"))

__all__ = [
    "TYPING_START_INTERVAL_S",
    "TYPING_STOP_INTERVAL_S",
    "TYPING_STOP_DELAY_S",
]
