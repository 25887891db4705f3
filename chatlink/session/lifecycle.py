"""Generation token for session teardown.

Coroutines that await network I/O capture the generation when they start
and check it when they resume. ``close()`` bumps the generation, so any
continuation that outlived a ``disconnect()`` sees a stale token and returns
without touching shared state.
"""

from __future__ import annotations

import logging

from chatlink.errors import SessionClosedError

logger = logging.getLogger(__name__)


class SessionLifecycle:
    """Open/closed flag plus a monotonically increasing generation."""

    def __init__(self) -> None:
        self._generation = 0
        self._open = False

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> int:
        """Start a new generation and return its token."""
        self._generation += 1
        self._open = True
        return self._generation

    def close(self) -> bool:
        """Invalidate every outstanding token. Returns False if already closed."""
        was_open = self._open
        self._generation += 1
        self._open = False
        return was_open

    def is_current(self, generation: int) -> bool:
        return self._open and generation == self._generation

    def ensure_current(self, generation: int, operation: str) -> None:
        """Raise when the session was torn down while ``operation`` awaited."""
        if not self.is_current(generation):
            logger.debug("session: %s abandoned after teardown (generation %d)", operation, generation)
            raise SessionClosedError(f"session closed during {operation}")


__all__ = ["SessionLifecycle"]
