"""Chat platform REST endpoints (session service and health probe)."""

from __future__ import annotations

import os

CHAT_API_BASE_URL = os.getenv("CHAT_API_BASE_URL", "http://localhost:8000")
CHAT_API_HEALTH_PATH = os.getenv("CHAT_API_HEALTH_PATH", "/api/v1/health")
CHAT_API_CREATE_PATH = os.getenv("CHAT_API_CREATE_PATH", "/api/v1/chat")
CHAT_API_TIMEOUT_S = float(os.getenv("CHAT_API_TIMEOUT_S", "30"))
CHAT_API_TENANT_HEADER = os.getenv("CHAT_API_TENANT_HEADER", "X-Tenant-ID")

__all__ = [
    "CHAT_API_BASE_URL",
    "CHAT_API_HEALTH_PATH",
    "CHAT_API_CREATE_PATH",
    "CHAT_API_TIMEOUT_S",
    "CHAT_API_TENANT_HEADER",
]
