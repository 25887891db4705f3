"""Reconnection backoff configuration.

The delay before attempt ``n`` is ``base * 2 ** (n - 1)`` with symmetric
jitter, raised to the floor of the error class that caused the drop and
capped at RECONNECT_MAX_DELAY_S.
"""

from __future__ import annotations

import os

# ============================================================================
# Backoff Curve
# ============================================================================

RECONNECT_BASE_DELAY_S = float(os.getenv("RECONNECT_BASE_DELAY_S", "1.0"))
RECONNECT_MAX_DELAY_S = float(os.getenv("RECONNECT_MAX_DELAY_S", "30"))
RECONNECT_JITTER_RATIO = float(os.getenv("RECONNECT_JITTER_RATIO", "0.2"))  # +/-20%
RECONNECT_MAX_ATTEMPTS = int(os.getenv("RECONNECT_MAX_ATTEMPTS", "3"))

# ============================================================================
# Per-Class Floors
# ============================================================================

RECONNECT_RATE_LIMIT_FLOOR_S = float(os.getenv("RECONNECT_RATE_LIMIT_FLOOR_S", "5"))
RECONNECT_PLATFORM_INIT_FLOOR_S = float(os.getenv("RECONNECT_PLATFORM_INIT_FLOOR_S", "2"))
RECONNECT_NETWORK_FLOOR_S = float(os.getenv("RECONNECT_NETWORK_FLOOR_S", "3"))
RECONNECT_SERVER_FLOOR_S = float(os.getenv("RECONNECT_SERVER_FLOOR_S", "4"))

__all__ = [
    "RECONNECT_BASE_DELAY_S",
    "RECONNECT_MAX_DELAY_S",
    "RECONNECT_JITTER_RATIO",
    "RECONNECT_MAX_ATTEMPTS",
    "RECONNECT_RATE_LIMIT_FLOOR_S",
    "RECONNECT_PLATFORM_INIT_FLOOR_S",
    "RECONNECT_NETWORK_FLOOR_S",
    "RECONNECT_SERVER_FLOOR_S",
]
