"""Session orchestration: initialization, lifecycle, typing and the coordinator."""

from .coordinator import SessionCoordinator
from .initialization import create_session_with_retries, wait_for_platform_ready
from .lifecycle import SessionLifecycle
from .typing_throttle import TypingThrottle

__all__ = [
    "SessionCoordinator",
    "SessionLifecycle",
    "TypingThrottle",
    "create_session_with_retries",
    "wait_for_platform_ready",
]
