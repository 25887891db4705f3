"""Error classes that drive retry and reconnection policy."""

from __future__ import annotations

from enum import Enum


class ErrorClass(str, Enum):
    """Coarse failure category shared by the transport and session layers."""

    NETWORK = "network_error"
    SERVER = "server_error"
    PLATFORM_INITIALIZING = "platform_initializing"
    RATE_LIMIT = "rate_limit_error"
    PROTOCOL = "protocol_error"
    AUTHENTICATION = "authentication_error"
    CONFIGURATION = "configuration_error"
    VALIDATION = "validation_error"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


UNRECOVERABLE_CLASSES: frozenset[ErrorClass] = frozenset(
    {ErrorClass.AUTHENTICATION, ErrorClass.CONFIGURATION, ErrorClass.VALIDATION}
)


def is_recoverable(error_class: ErrorClass | None) -> bool:
    """Return True when retrying after this class of failure can succeed."""
    return error_class not in UNRECOVERABLE_CLASSES


__all__ = ["ErrorClass", "UNRECOVERABLE_CLASSES", "is_recoverable"]
