"""Centralized exception classes for the chat client.

This module re-exports all domain-specific exceptions from their respective
modules, providing a single import point for error handling.

Organization:
    - kinds.py: ErrorClass enum and recoverability
    - transport.py: network failures, socket closes, send gating
    - protocol.py: malformed frames
    - auth.py: authentication and configuration (unrecoverable)
    - limits.py: rate limiting with retry info
    - validation.py: input validation errors with error codes
    - timeouts.py: ready, message and stream timeouts
    - session.py: session creation and teardown
    - state.py: illegal state machine transitions
    - classify.py: exception-to-ErrorClass mapping
"""

from .base import ChatClientError
from .kinds import ErrorClass, UNRECOVERABLE_CLASSES, is_recoverable
from .transport import TransportError, ConnectionClosedError, ConnectionNotReadyError
from .protocol import ProtocolError, ServerReportedError
from .auth import AuthenticationError, ConfigurationError
from .limits import RateLimitError
from .validation import ValidationError
from .timeouts import ChatTimeoutError, ReadyTimeoutError, MessageTimeoutError, StreamTimeoutError
from .session import SessionCreationError, SessionClosedError
from .state import InvalidTransitionError
from .classify import classify_error

__all__ = [
    # Base
    "ChatClientError",
    # Classes
    "ErrorClass",
    "UNRECOVERABLE_CLASSES",
    "is_recoverable",
    # Transport
    "TransportError",
    "ConnectionClosedError",
    "ConnectionNotReadyError",
    # Protocol
    "ProtocolError",
    "ServerReportedError",
    # Auth / configuration
    "AuthenticationError",
    "ConfigurationError",
    # Rate limiting
    "RateLimitError",
    # Validation
    "ValidationError",
    # Timeouts
    "ChatTimeoutError",
    "ReadyTimeoutError",
    "MessageTimeoutError",
    "StreamTimeoutError",
    # Session
    "SessionCreationError",
    "SessionClosedError",
    # State
    "InvalidTransitionError",
    # Classification
    "classify_error",
]
