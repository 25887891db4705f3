"""Typing indicator throttle state."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class TypingState:
    signaling: bool = False
    last_start_at: float | None = None
    last_stop_at: float | None = None
    starts: int = 0
    stops: int = 0
    throttled: int = 0

    def reset(self) -> None:
        self.signaling = False
        self.last_start_at = None
        self.last_stop_at = None
        self.starts = 0
        self.stops = 0
        self.throttled = 0


@dataclass(frozen=True)
class TypingStats:
    """Snapshot of throttle counters.

    ``reduction_percentage`` is the share of signals that never reached the
    network, rounded to a whole percent.
    """

    starts: int
    stops: int
    throttled: int
    reduction_percentage: int
    signaling: bool


__all__ = ["TypingState", "TypingStats"]
