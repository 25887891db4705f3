"""Dataclasses and enums for connection, message and session state."""

from .connection import (
    CONNECTION_TRANSITIONS,
    ConnectionState,
    ConnectionStateChange,
    ReconnectPolicy,
    ReconnectState,
)
from .indicators import TypingState, TypingStats
from .messages import Message, MessageMetadata, MessageRole, MessageStatus
from .registry import (
    REGISTRY_TRANSITIONS,
    RegistryEntry,
    RegistryState,
    RegistryStats,
    RegistryTransition,
)
from .session import ChatSession, InitializeOptions
from .streaming import StreamBuffer

__all__ = [
    "CONNECTION_TRANSITIONS",
    "ConnectionState",
    "ConnectionStateChange",
    "ReconnectPolicy",
    "ReconnectState",
    "TypingState",
    "TypingStats",
    "Message",
    "MessageMetadata",
    "MessageRole",
    "MessageStatus",
    "REGISTRY_TRANSITIONS",
    "RegistryEntry",
    "RegistryState",
    "RegistryStats",
    "RegistryTransition",
    "ChatSession",
    "InitializeOptions",
    "StreamBuffer",
]
