"""WebSocket connection configuration values.

This module defines the constants used when opening and supervising the
chat WebSocket:

Endpoint:
    CHAT_WS_BASE_URL / CHAT_WS_PATH: Where the chat socket lives. Identity
        (tenant, chat, client, token) is appended as URL parameters.

Timeouts:
    WS_CONNECT_TIMEOUT_S: Max time to wait for the opening handshake.

Deduplication:
    WS_DEDUP_WINDOW_S: Identical inbound events inside this window are
        dropped. Servers occasionally replay frames after a reconnect or
        emit the same event under two names.

Close Codes (RFC 6455 plus application codes):
    1000: Normal closure (no reconnect)
    1008: Policy violation (auth failure, terminal)
    1011: Internal server error
    1012: Service restart (platform initializing)
    1013: Try again later
    4001: Tenant configuration rejected (terminal)
    4003: Rate limited
    4004: Authentication failed (terminal)

Environment Variables:
    All values can be overridden.
"""

from __future__ import annotations

import os

# ============================================================================
# Endpoint Configuration
# ============================================================================

CHAT_WS_BASE_URL = os.getenv("CHAT_WS_BASE_URL", "ws://localhost:8000")
CHAT_WS_PATH = os.getenv("CHAT_WS_PATH", "/api/v1/ws/chat")
CHAT_TENANT_ID = os.getenv("CHAT_TENANT_ID", "")
CHAT_CLIENT_ID = os.getenv("CHAT_CLIENT_ID") or None

# ============================================================================
# Timeout Configuration
# ============================================================================

WS_CONNECT_TIMEOUT_S = float(os.getenv("WS_CONNECT_TIMEOUT_S", "10"))
WS_CLOSE_TIMEOUT_S = float(os.getenv("WS_CLOSE_TIMEOUT_S", "2"))
WS_MAX_MESSAGE_BYTES = int(os.getenv("WS_MAX_MESSAGE_BYTES", str(1 << 20)))

# ============================================================================
# Deduplication
# ============================================================================

WS_DEDUP_WINDOW_S = float(os.getenv("WS_DEDUP_WINDOW_S", "1.0"))
WS_DEDUP_MAX_ENTRIES = int(os.getenv("WS_DEDUP_MAX_ENTRIES", "1000"))
WS_DEDUP_CONTENT_PREFIX = int(os.getenv("WS_DEDUP_CONTENT_PREFIX", "50"))

# ============================================================================
# WebSocket Close Codes
# ============================================================================

WS_CLOSE_NORMAL_CODE = int(os.getenv("WS_CLOSE_NORMAL_CODE", "1000"))
WS_CLOSE_GOING_AWAY_CODE = int(os.getenv("WS_CLOSE_GOING_AWAY_CODE", "1001"))
WS_CLOSE_ABNORMAL_CODE = int(os.getenv("WS_CLOSE_ABNORMAL_CODE", "1006"))
WS_CLOSE_POLICY_VIOLATION_CODE = int(os.getenv("WS_CLOSE_POLICY_VIOLATION_CODE", "1008"))
WS_CLOSE_SERVER_ERROR_CODE = int(os.getenv("WS_CLOSE_SERVER_ERROR_CODE", "1011"))
WS_CLOSE_SERVICE_RESTART_CODE = int(os.getenv("WS_CLOSE_SERVICE_RESTART_CODE", "1012"))
WS_CLOSE_TRY_AGAIN_CODE = int(os.getenv("WS_CLOSE_TRY_AGAIN_CODE", "1013"))
WS_CLOSE_TENANT_CONFIG_CODE = int(os.getenv("WS_CLOSE_TENANT_CONFIG_CODE", "4001"))
WS_CLOSE_RATE_LIMIT_CODE = int(os.getenv("WS_CLOSE_RATE_LIMIT_CODE", "4003"))
WS_CLOSE_AUTH_FAILED_CODE = int(os.getenv("WS_CLOSE_AUTH_FAILED_CODE", "4004"))
WS_CLOSE_CLIENT_REASON = os.getenv("WS_CLOSE_CLIENT_REASON", "client_disconnect")

__all__ = [
    "CHAT_WS_BASE_URL",
    "CHAT_WS_PATH",
    "CHAT_TENANT_ID",
    "CHAT_CLIENT_ID",
    "WS_CONNECT_TIMEOUT_S",
    "WS_CLOSE_TIMEOUT_S",
    "WS_MAX_MESSAGE_BYTES",
    "WS_DEDUP_WINDOW_S",
    "WS_DEDUP_MAX_ENTRIES",
    "WS_DEDUP_CONTENT_PREFIX",
    "WS_CLOSE_NORMAL_CODE",
    "WS_CLOSE_GOING_AWAY_CODE",
    "WS_CLOSE_ABNORMAL_CODE",
    "WS_CLOSE_POLICY_VIOLATION_CODE",
    "WS_CLOSE_SERVER_ERROR_CODE",
    "WS_CLOSE_SERVICE_RESTART_CODE",
    "WS_CLOSE_TRY_AGAIN_CODE",
    "WS_CLOSE_TENANT_CONFIG_CODE",
    "WS_CLOSE_RATE_LIMIT_CODE",
    "WS_CLOSE_AUTH_FAILED_CODE",
    "WS_CLOSE_CLIENT_REASON",
]
