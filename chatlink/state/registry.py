"""Registry bookkeeping for outbound messages.

State graph::

    CREATED -> SENDING -> {SENT | FAILED} -> {DELIVERED | RECEIVED} -> RECONCILED

SENT may reconcile directly when the acknowledgment carries the server id.
DELIVERED and RECEIVED may follow each other in either order. RECONCILED is
terminal.
"""

from __future__ import annotations

import time
from enum import Enum
from typing import Any
from dataclasses import field, dataclass

from .messages import Message


class RegistryState(str, Enum):
    CREATED = "created"
    SENDING = "sending"
    SENT = "sent"
    FAILED = "failed"
    DELIVERED = "delivered"
    RECEIVED = "received"
    RECONCILED = "reconciled"


REGISTRY_TRANSITIONS: dict[RegistryState, frozenset[RegistryState]] = {
    RegistryState.CREATED: frozenset({RegistryState.SENDING, RegistryState.FAILED}),
    RegistryState.SENDING: frozenset({RegistryState.SENT, RegistryState.FAILED}),
    RegistryState.SENT: frozenset(
        {
            RegistryState.DELIVERED,
            RegistryState.RECEIVED,
            RegistryState.RECONCILED,
            RegistryState.FAILED,
        }
    ),
    RegistryState.FAILED: frozenset({RegistryState.DELIVERED, RegistryState.RECEIVED}),
    RegistryState.DELIVERED: frozenset({RegistryState.RECEIVED, RegistryState.RECONCILED}),
    RegistryState.RECEIVED: frozenset({RegistryState.DELIVERED, RegistryState.RECONCILED}),
    RegistryState.RECONCILED: frozenset(),
}


@dataclass(frozen=True)
class RegistryTransition:
    state: RegistryState
    at: float
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class RegistryEntry:
    """Tracked lifecycle of one outbound message.

    Attributes:
        message: The message object shared with the conversation list.
        temp_id: Client-generated id, stable for the entry's lifetime.
        server_id: Server-assigned id once reconciled.
        state: Current position in the registry graph.
        registered_at: Wall-clock registration time.
        context: Caller-provided context (chat id, retry origin).
        metadata: Merged metadata from every transition.
        history: Timestamped transitions, oldest first.
    """

    message: Message
    temp_id: str
    state: RegistryState = RegistryState.CREATED
    server_id: str | None = None
    registered_at: float = field(default_factory=time.time)
    reconciled_at: float | None = None
    context: dict[str, Any] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)
    history: list[RegistryTransition] = field(default_factory=list)

    @property
    def current_id(self) -> str:
        return self.server_id or self.temp_id

    @property
    def is_reconciled(self) -> bool:
        return self.server_id is not None

    def can_transition(self, target: RegistryState) -> bool:
        return target in REGISTRY_TRANSITIONS[self.state]


@dataclass(frozen=True)
class RegistryStats:
    total: int
    reconciled: int
    failed: int
    orphaned: int
    pending: int
    average_reconcile_s: float


__all__ = [
    "RegistryEntry",
    "RegistryState",
    "RegistryStats",
    "RegistryTransition",
    "REGISTRY_TRANSITIONS",
]
