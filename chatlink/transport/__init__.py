"""WebSocket transport: URL building, close-code policy, backoff, manager."""

from .backoff import compute_reconnect_delay, exponential_delay
from .close_codes import CloseDisposition, classify_close
from .manager import ConnectFn, ConnectionManager, handshake_error, open_websocket
from .parser import encode_frame, parse_frame
from .urls import build_connection_url, redact_url

__all__ = [
    "CloseDisposition",
    "ConnectFn",
    "ConnectionManager",
    "build_connection_url",
    "classify_close",
    "compute_reconnect_delay",
    "encode_frame",
    "exponential_delay",
    "handshake_error",
    "open_websocket",
    "parse_frame",
    "redact_url",
]
