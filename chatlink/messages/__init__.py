"""Message lifecycle tracking and streamed response assembly."""

from .registry import MessageRegistry
from .streaming import STREAM_TIMEOUT_REASON, StreamAssembler

__all__ = ["MessageRegistry", "StreamAssembler", "STREAM_TIMEOUT_REASON"]
