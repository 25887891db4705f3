"""Session orchestration configuration values.

Sections:
    Initialization: readiness probe polling and chat creation retries
    Messages: per-message limits and timeouts
    Registry: reconciliation threshold and orphan housekeeping
"""

from __future__ import annotations

import os


# ============================================================================
# Initialization
# ============================================================================

SESSION_READY_TIMEOUT_S = float(os.getenv("SESSION_READY_TIMEOUT_S", "10"))
READINESS_PROBE_ATTEMPTS = int(os.getenv("READINESS_PROBE_ATTEMPTS", "5"))
READINESS_PROBE_DELAY_S = float(os.getenv("READINESS_PROBE_DELAY_S", "1.7"))
SESSION_CREATE_MAX_RETRIES = int(os.getenv("SESSION_CREATE_MAX_RETRIES", "3"))
SESSION_CREATE_RETRY_DELAY_S = float(os.getenv("SESSION_CREATE_RETRY_DELAY_S", "1.0"))
SESSION_ALLOW_DEGRADED = (os.getenv("SESSION_ALLOW_DEGRADED", "1") or "1").lower() in {"1", "true", "yes", "on"}
SESSION_TITLE = os.getenv("SESSION_TITLE", "Website Chat Session")

# ============================================================================
# Messages
# ============================================================================

MESSAGE_TIMEOUT_S = float(os.getenv("MESSAGE_TIMEOUT_S", "30"))
MESSAGE_MAX_LENGTH = int(os.getenv("MESSAGE_MAX_LENGTH", "4000"))

# ============================================================================
# Registry
# ============================================================================

RECONCILE_SIMILARITY_THRESHOLD = float(os.getenv("RECONCILE_SIMILARITY_THRESHOLD", "0.7"))
REGISTRY_ORPHAN_TIMEOUT_S = float(os.getenv("REGISTRY_ORPHAN_TIMEOUT_S", "300"))
REGISTRY_MAX_ORPHANS = int(os.getenv("REGISTRY_MAX_ORPHANS", "100"))
REGISTRY_CLEANUP_INTERVAL_S = float(os.getenv("REGISTRY_CLEANUP_INTERVAL_S", "60"))

__all__ = [
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
]
