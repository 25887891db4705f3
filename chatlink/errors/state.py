"""State machine violations."""

from __future__ import annotations

from .base import ChatClientError


class InvalidTransitionError(ChatClientError):
    """Raised when a state change is not allowed by its transition graph."""

    def __init__(self, machine: str, current: str, target: str) -> None:
        super().__init__(f"{machine}: illegal transition {current} -> {target}")
        self.machine = machine
        self.current = current
        self.target = target


__all__ = ["InvalidTransitionError"]
