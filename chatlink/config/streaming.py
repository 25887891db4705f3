"""Streamed response assembly configuration."""

from __future__ import annotations

import os

STREAM_EXPIRY_S = float(os.getenv("STREAM_EXPIRY_S", "20"))  # No chunk for this long -> failed
STREAM_FLUSH_INTERVAL_S = float(os.getenv("STREAM_FLUSH_INTERVAL_S", "0.03"))  # UI batching

__all__ = ["STREAM_EXPIRY_S", "STREAM_FLUSH_INTERVAL_S"]
