"""Connection lifecycle state and reconnection bookkeeping.

ConnectionState:
    The six-state machine owned by the connection manager. Allowed moves are
    listed in CONNECTION_TRANSITIONS; anything else is a bug and raises.

    DISCONNECTED/FAILED -> CONNECTING -> CONNECTED -> READY
    DISCONNECTED/FAILED -> RECONNECTING (caller-requested reconnect)
    READY/CONNECTED -> DISCONNECTED | RECONNECTING | FAILED
    RECONNECTING -> CONNECTING (backoff timer) | DISCONNECTED | FAILED

ReconnectPolicy:
    Immutable backoff parameters (base, cap, jitter, attempt budget and
    per-error-class floors).

ReconnectState:
    Mutable counters for the reconnect loop currently in progress.
"""

from __future__ import annotations

from enum import Enum
from collections.abc import Mapping
from dataclasses import field, dataclass

from chatlink.errors.kinds import ErrorClass
from chatlink.config.reconnect import (
    RECONNECT_BASE_DELAY_S,
    RECONNECT_MAX_DELAY_S,
    RECONNECT_JITTER_RATIO,
    RECONNECT_MAX_ATTEMPTS,
    RECONNECT_RATE_LIMIT_FLOOR_S,
    RECONNECT_PLATFORM_INIT_FLOOR_S,
    RECONNECT_NETWORK_FLOOR_S,
    RECONNECT_SERVER_FLOOR_S,
)


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    READY = "ready"
    RECONNECTING = "reconnecting"
    FAILED = "failed"


CONNECTION_TRANSITIONS: dict[ConnectionState, frozenset[ConnectionState]] = {
    ConnectionState.DISCONNECTED: frozenset({ConnectionState.CONNECTING, ConnectionState.RECONNECTING}),
    ConnectionState.FAILED: frozenset(
        {
            ConnectionState.CONNECTING,
            ConnectionState.RECONNECTING,
            ConnectionState.DISCONNECTED,
        }
    ),
    ConnectionState.CONNECTING: frozenset(
        {
            ConnectionState.CONNECTED,
            ConnectionState.DISCONNECTED,
            ConnectionState.RECONNECTING,
            ConnectionState.FAILED,
        }
    ),
    ConnectionState.CONNECTED: frozenset(
        {
            ConnectionState.READY,
            ConnectionState.DISCONNECTED,
            ConnectionState.RECONNECTING,
            ConnectionState.FAILED,
        }
    ),
    ConnectionState.READY: frozenset(
        {
            ConnectionState.DISCONNECTED,
            ConnectionState.RECONNECTING,
            ConnectionState.FAILED,
        }
    ),
    ConnectionState.RECONNECTING: frozenset(
        {
            ConnectionState.CONNECTING,
            ConnectionState.DISCONNECTED,
            ConnectionState.FAILED,
        }
    ),
}


def default_floors() -> dict[ErrorClass, float]:
    return {
        ErrorClass.RATE_LIMIT: RECONNECT_RATE_LIMIT_FLOOR_S,
        ErrorClass.PLATFORM_INITIALIZING: RECONNECT_PLATFORM_INIT_FLOOR_S,
        ErrorClass.NETWORK: RECONNECT_NETWORK_FLOOR_S,
        ErrorClass.SERVER: RECONNECT_SERVER_FLOOR_S,
    }


@dataclass(frozen=True)
class ReconnectPolicy:
    """Backoff parameters for the reconnect loop.

    Attributes:
        base_delay_s: Delay before the first attempt, before jitter.
        max_delay_s: Hard cap applied after floors.
        jitter_ratio: Symmetric jitter as a fraction of the exponential value.
        max_attempts: Attempts allowed before giving up with FAILED.
        floors: Minimum delay per error class.
    """

    base_delay_s: float = RECONNECT_BASE_DELAY_S
    max_delay_s: float = RECONNECT_MAX_DELAY_S
    jitter_ratio: float = RECONNECT_JITTER_RATIO
    max_attempts: int = RECONNECT_MAX_ATTEMPTS
    floors: Mapping[ErrorClass, float] = field(default_factory=default_floors)

    def floor_for(self, error_class: ErrorClass | None) -> float:
        if error_class is None:
            return 0.0
        return float(self.floors.get(error_class, 0.0))


@dataclass
class ReconnectState:
    """Counters for the reconnect loop in progress."""

    attempt: int = 0
    last_error_class: ErrorClass | None = None
    delay_s: float = 0.0

    def reset(self) -> None:
        self.attempt = 0
        self.last_error_class = None
        self.delay_s = 0.0


@dataclass(frozen=True)
class ConnectionStateChange:
    """Payload published on every connection state transition."""

    previous: ConnectionState
    current: ConnectionState
    reason: str | None = None
    close_code: int | None = None


__all__ = [
    "ConnectionState",
    "CONNECTION_TRANSITIONS",
    "ConnectionStateChange",
    "ReconnectPolicy",
    "ReconnectState",
    "default_floors",
]
