"""Close-code policy.

The code the server closes with decides what the client does next:

    normal (1000, or a close the client asked for) -> DISCONNECTED, no retry
    auth / tenant config (1008, 4001, 4004)         -> FAILED, terminal
    rate limit (4003)                               -> RECONNECTING, 5s floor
    restart / try again (1012, 1013)                -> RECONNECTING, 2s floor
    internal error (1011)                           -> RECONNECTING, 4s floor
    anything else (1001, 1003, 1006, ...)           -> RECONNECTING, 3s floor
"""

from __future__ import annotations

from dataclasses import dataclass

from chatlink.config.websocket import (
    WS_CLOSE_NORMAL_CODE,
    WS_CLOSE_POLICY_VIOLATION_CODE,
    WS_CLOSE_SERVER_ERROR_CODE,
    WS_CLOSE_SERVICE_RESTART_CODE,
    WS_CLOSE_TRY_AGAIN_CODE,
    WS_CLOSE_TENANT_CONFIG_CODE,
    WS_CLOSE_RATE_LIMIT_CODE,
    WS_CLOSE_AUTH_FAILED_CODE,
)
from chatlink.errors.kinds import ErrorClass
from chatlink.state.connection import ConnectionState


@dataclass(frozen=True)
class CloseDisposition:
    """What to do after the socket closed.

    Attributes:
        next_state: DISCONNECTED, FAILED or RECONNECTING.
        error_class: Class used for backoff floors and logging; None for a
            normal close.
        label: Short name for logs and the state-change reason.
    """

    next_state: ConnectionState
    error_class: ErrorClass | None
    label: str

    @property
    def should_reconnect(self) -> bool:
        return self.next_state is ConnectionState.RECONNECTING


_NORMAL = CloseDisposition(ConnectionState.DISCONNECTED, None, "normal_closure")

_BY_CODE: dict[int, CloseDisposition] = {
    WS_CLOSE_NORMAL_CODE: _NORMAL,
    WS_CLOSE_POLICY_VIOLATION_CODE: CloseDisposition(
        ConnectionState.FAILED, ErrorClass.AUTHENTICATION, "policy_violation"
    ),
    WS_CLOSE_AUTH_FAILED_CODE: CloseDisposition(
        ConnectionState.FAILED, ErrorClass.AUTHENTICATION, "authentication_failed"
    ),
    WS_CLOSE_TENANT_CONFIG_CODE: CloseDisposition(
        ConnectionState.FAILED, ErrorClass.CONFIGURATION, "invalid_tenant"
    ),
    WS_CLOSE_RATE_LIMIT_CODE: CloseDisposition(
        ConnectionState.RECONNECTING, ErrorClass.RATE_LIMIT, "rate_limited"
    ),
    WS_CLOSE_SERVICE_RESTART_CODE: CloseDisposition(
        ConnectionState.RECONNECTING, ErrorClass.PLATFORM_INITIALIZING, "service_restart"
    ),
    WS_CLOSE_TRY_AGAIN_CODE: CloseDisposition(
        ConnectionState.RECONNECTING, ErrorClass.PLATFORM_INITIALIZING, "try_again_later"
    ),
    WS_CLOSE_SERVER_ERROR_CODE: CloseDisposition(
        ConnectionState.RECONNECTING, ErrorClass.SERVER, "server_error"
    ),
}


def classify_close(code: int | None, *, client_initiated: bool = False) -> CloseDisposition:
    """Map a close code to the next connection state and error class."""
    if client_initiated:
        return _NORMAL
    if code is not None and code in _BY_CODE:
        return _BY_CODE[code]
    return CloseDisposition(ConnectionState.RECONNECTING, ErrorClass.NETWORK, f"abnormal_closure:{code}")


__all__ = ["CloseDisposition", "classify_close"]
