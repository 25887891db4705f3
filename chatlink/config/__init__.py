"""Aggregator of configuration modules.

This module re-exports the config API from smaller modules:
- websocket: endpoint, timeouts, dedup window, close codes
- reconnect: backoff curve and per-class floors
- session: initialization, message limits, registry housekeeping
- streaming: stream expiry and UI batching
- indicators: typing throttle
- platform: REST session service and health probe
- secrets: auth token and API key
"""

from .websocket import (
    CHAT_WS_BASE_URL,
    CHAT_WS_PATH,
    CHAT_TENANT_ID,
    CHAT_CLIENT_ID,
    WS_CONNECT_TIMEOUT_S,
    WS_CLOSE_TIMEOUT_S,
    WS_MAX_MESSAGE_BYTES,
    WS_DEDUP_WINDOW_S,
    WS_DEDUP_MAX_ENTRIES,
    WS_DEDUP_CONTENT_PREFIX,
    WS_CLOSE_NORMAL_CODE,
    WS_CLOSE_GOING_AWAY_CODE,
    WS_CLOSE_ABNORMAL_CODE,
    WS_CLOSE_POLICY_VIOLATION_CODE,
    WS_CLOSE_SERVER_ERROR_CODE,
    WS_CLOSE_SERVICE_RESTART_CODE,
    WS_CLOSE_TRY_AGAIN_CODE,
    WS_CLOSE_TENANT_CONFIG_CODE,
    WS_CLOSE_RATE_LIMIT_CODE,
    WS_CLOSE_AUTH_FAILED_CODE,
    WS_CLOSE_CLIENT_REASON,
)
from .reconnect import (
    RECONNECT_BASE_DELAY_S,
    RECONNECT_MAX_DELAY_S,
    RECONNECT_JITTER_RATIO,
    RECONNECT_MAX_ATTEMPTS,
    RECONNECT_RATE_LIMIT_FLOOR_S,
    RECONNECT_PLATFORM_INIT_FLOOR_S,
    RECONNECT_NETWORK_FLOOR_S,
    RECONNECT_SERVER_FLOOR_S,
)
from .session import (
    SESSION_READY_TIMEOUT_S,
    READINESS_PROBE_ATTEMPTS,
    READINESS_PROBE_DELAY_S,
    SESSION_CREATE_MAX_RETRIES,
    SESSION_CREATE_RETRY_DELAY_S,
    SESSION_ALLOW_DEGRADED,
    SESSION_TITLE,
    MESSAGE_TIMEOUT_S,
    MESSAGE_MAX_LENGTH,
    RECONCILE_SIMILARITY_THRESHOLD,
    REGISTRY_ORPHAN_TIMEOUT_S,
    REGISTRY_MAX_ORPHANS,
    REGISTRY_CLEANUP_INTERVAL_S,
)
from .streaming import STREAM_EXPIRY_S, STREAM_FLUSH_INTERVAL_S
from .indicators import (
    TYPING_START_INTERVAL_S,
    TYPING_STOP_INTERVAL_S,
    TYPING_STOP_DELAY_S,
)
from .platform import (
    CHAT_API_BASE_URL,
    CHAT_API_HEALTH_PATH,
    CHAT_API_CREATE_PATH,
    CHAT_API_TIMEOUT_S,
    CHAT_API_TENANT_HEADER,
)
from .secrets import CHAT_AUTH_TOKEN, CHAT_API_KEY

__all__ = [
    # websocket
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
    # reconnect
    "RECONNECT_BASE_DELAY_S",
    "RECONNECT_MAX_DELAY_S",
    "RECONNECT_JITTER_RATIO",
    "RECONNECT_MAX_ATTEMPTS",
    "RECONNECT_RATE_LIMIT_FLOOR_S",
    "RECONNECT_PLATFORM_INIT_FLOOR_S",
    "RECONNECT_NETWORK_FLOOR_S",
    "RECONNECT_SERVER_FLOOR_S",
    # session
    "SESSION_READY_TIMEOUT_S",
    "READINESS_PROBE_ATTEMPTS",
    "READINESS_PROBE_DELAY_S",
    "SESSION_CREATE_MAX_RETRIES",
    "SESSION_CREATE_RETRY_DELAY_S",
    "SESSION_ALLOW_DEGRADED",
    "SESSION_TITLE",
    "MESSAGE_TIMEOUT_S",
    "MESSAGE_MAX_LENGTH",
    "RECONCILE_SIMILARITY_THRESHOLD",
    "REGISTRY_ORPHAN_TIMEOUT_S",
    "REGISTRY_MAX_ORPHANS",
    "REGISTRY_CLEANUP_INTERVAL_S",
    # streaming
    "STREAM_EXPIRY_S",
    "STREAM_FLUSH_INTERVAL_S",
    # indicators
    "TYPING_START_INTERVAL_S",
    "TYPING_STOP_INTERVAL_S",
    "TYPING_STOP_DELAY_S",
    # platform
    "CHAT_API_BASE_URL",
    "CHAT_API_HEALTH_PATH",
    "CHAT_API_CREATE_PATH",
    "CHAT_API_TIMEOUT_S",
    "CHAT_API_TENANT_HEADER",
    # secrets
    "CHAT_AUTH_TOKEN",
    "CHAT_API_KEY",
]
