"""Exception classification for retry policy and log labels."""

from __future__ import annotations

from .auth import AuthenticationError, ConfigurationError
from .kinds import ErrorClass
from .limits import RateLimitError
from .protocol import ProtocolError
from .session import SessionCreationError
from .state import InvalidTransitionError
from .timeouts import ChatTimeoutError
from .transport import ConnectionNotReadyError
from .validation import ValidationError

ERROR_CATEGORIES: tuple[tuple[type[BaseException], ErrorClass], ...] = (
    (ValidationError, ErrorClass.VALIDATION),
    (ConnectionNotReadyError, ErrorClass.VALIDATION),
    (AuthenticationError, ErrorClass.AUTHENTICATION),
    (ConfigurationError, ErrorClass.CONFIGURATION),
    (RateLimitError, ErrorClass.RATE_LIMIT),
    (ProtocolError, ErrorClass.PROTOCOL),
    (InvalidTransitionError, ErrorClass.PROTOCOL),
    (ChatTimeoutError, ErrorClass.TIMEOUT),
    (TimeoutError, ErrorClass.TIMEOUT),
    (ConnectionError, ErrorClass.NETWORK),
    (OSError, ErrorClass.NETWORK),
)

_SESSION_KIND_CLASSES = {
    "server": ErrorClass.SERVER,
    "schema": ErrorClass.PROTOCOL,
    "network": ErrorClass.NETWORK,
    "rate_limit": ErrorClass.RATE_LIMIT,
    "auth": ErrorClass.AUTHENTICATION,
    "client": ErrorClass.CONFIGURATION,
}


def classify_error(exc: BaseException) -> ErrorClass:
    """Map an exception to the error class that decides retry policy."""

    explicit = getattr(exc, "error_class", None)
    if isinstance(explicit, ErrorClass):
        return explicit
    if isinstance(exc, SessionCreationError):
        return _SESSION_KIND_CLASSES.get(exc.kind, ErrorClass.UNKNOWN)
    for cls, label in ERROR_CATEGORIES:
        if isinstance(exc, cls):
            return label
    return ErrorClass.UNKNOWN


__all__ = ["ERROR_CATEGORIES", "classify_error"]
