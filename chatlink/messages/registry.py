"""Outbound message registry and id reconciliation.

Every user message gets a temporary id (``temp_<ms>_<hex8>``) when it is
registered, before anything goes on the wire. The server later confirms the
message under its own id; reconciliation remaps the entry so lookups by
either id resolve to the same record.

Correlation order, strongest first:
    1. ``reconcile_message(temp_id, server_id)`` when the acknowledgment
       echoes the client correlation id.
    2. ``reconcile_by_content(content, server_id)`` when it does not; the
       most recent unreconciled entry whose content is similar enough wins.

Reconciliation happens at most once per entry. A second attempt, an unknown
temp id, or a server id already owned by another entry is a logged no-op.
"""

from __future__ import annotations

import time
import logging
from collections.abc import Callable
from typing import Any

from chatlink.config.session import (
    RECONCILE_SIMILARITY_THRESHOLD,
    REGISTRY_ORPHAN_TIMEOUT_S,
    REGISTRY_MAX_ORPHANS,
)
from chatlink.errors import InvalidTransitionError
from chatlink.helpers.ids import new_temp_id
from chatlink.helpers.similarity import content_similarity
from chatlink.state.messages import Message
from chatlink.state.registry import (
    RegistryEntry,
    RegistryState,
    RegistryStats,
    RegistryTransition,
)

logger = logging.getLogger(__name__)

TimeFn = Callable[[], float]

_PENDING_STATES = frozenset({RegistryState.CREATED, RegistryState.SENDING})


class MessageRegistry:
    """Lifecycle tracker for outbound messages of one session."""

    def __init__(
        self,
        *,
        similarity_threshold: float = RECONCILE_SIMILARITY_THRESHOLD,
        orphan_timeout_s: float = REGISTRY_ORPHAN_TIMEOUT_S,
        max_orphans: int = REGISTRY_MAX_ORPHANS,
        now_fn: TimeFn | None = None,
    ) -> None:
        self.similarity_threshold = float(similarity_threshold)
        self.orphan_timeout_s = float(orphan_timeout_s)
        self.max_orphans = int(max_orphans)
        self._now = now_fn or time.time
        self._entries: dict[str, RegistryEntry] = {}
        self._server_ids: dict[str, str] = {}
        self._reconcile_durations: list[float] = []
        self._orphaned = 0

    # ------------------------------------------------------------------
    # Registration and lookup
    # ------------------------------------------------------------------

    def register_message(self, draft: Message, context: dict[str, Any] | None = None) -> RegistryEntry:
        """Track ``draft``, assigning a temporary id when it has none.

        Raises:
            ValueError: The id is already tracked.
        """
        temp_id = draft.id or new_temp_id()
        if temp_id in self._entries or temp_id in self._server_ids:
            raise ValueError(f"message id {temp_id} is already registered")
        draft.id = temp_id
        draft.metadata.client_message_id = temp_id
        now = self._now()
        entry = RegistryEntry(
            message=draft,
            temp_id=temp_id,
            registered_at=now,
            context=dict(context or {}),
            history=[RegistryTransition(RegistryState.CREATED, now)],
        )
        self._entries[temp_id] = entry
        logger.debug("registry: registered %s", temp_id)
        return entry

    def get(self, message_id: str | None) -> RegistryEntry | None:
        """Resolve by temporary or server id."""
        if not message_id:
            return None
        entry = self._entries.get(message_id)
        if entry is not None:
            return entry
        temp_id = self._server_ids.get(message_id)
        return self._entries.get(temp_id) if temp_id else None

    def __contains__(self, message_id: object) -> bool:
        return isinstance(message_id, str) and self.get(message_id) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def entries(self) -> list[RegistryEntry]:
        return list(self._entries.values())

    def entries_in_state(self, state: RegistryState) -> list[RegistryEntry]:
        return [entry for entry in self._entries.values() if entry.state is state]

    def pending_entries(self) -> list[RegistryEntry]:
        """Entries not yet acknowledged, oldest first."""
        return [entry for entry in self._entries.values() if entry.state in _PENDING_STATES]

    def remove(self, message_id: str) -> RegistryEntry | None:
        entry = self.get(message_id)
        if entry is None:
            return None
        del self._entries[entry.temp_id]
        if entry.server_id:
            self._server_ids.pop(entry.server_id, None)
        return entry

    def clear(self) -> None:
        self._entries.clear()
        self._server_ids.clear()

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    def update_message_state(
        self,
        message_id: str,
        state: RegistryState,
        metadata: dict[str, Any] | None = None,
    ) -> RegistryEntry | None:
        """Move an entry along the graph, merging ``metadata``.

        Returns:
            The entry, or None when the id is unknown.

        Raises:
            InvalidTransitionError: ``state`` is not reachable from the
                entry's current state.
        """
        entry = self.get(message_id)
        if entry is None:
            logger.debug("registry: update for unknown id %s", message_id)
            return None
        if entry.state is state:
            if metadata:
                entry.metadata.update(metadata)
            return entry
        if not entry.can_transition(state):
            raise InvalidTransitionError("registry", entry.state.value, state.value)
        self._record(entry, state, metadata)
        return entry

    def _record(self, entry: RegistryEntry, state: RegistryState, metadata: dict[str, Any] | None) -> None:
        entry.state = state
        if metadata:
            entry.metadata.update(metadata)
        entry.history.append(RegistryTransition(state, self._now(), dict(metadata or {})))

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def reconcile_message(
        self,
        temp_id: str,
        server_id: str,
        payload: dict[str, Any] | None = None,
    ) -> RegistryEntry | None:
        """Remap ``temp_id`` to ``server_id`` exactly once.

        An entry still in SENDING is marked SENT first, since the
        acknowledgment that carries the server id also confirms delivery.
        """
        entry = self._entries.get(temp_id)
        if entry is None:
            logger.debug("registry: reconcile for unknown temp id %s", temp_id)
            return None
        if entry.is_reconciled:
            logger.debug("registry: %s already reconciled as %s", temp_id, entry.server_id)
            return None
        if not server_id:
            return None
        owner = self._server_ids.get(server_id)
        if owner is not None and owner != temp_id:
            logger.warning("registry: server id %s already owned by %s; ignoring %s", server_id, owner, temp_id)
            return None

        if entry.state in _PENDING_STATES:
            if entry.state is RegistryState.CREATED:
                self._record(entry, RegistryState.SENDING, None)
            self._record(entry, RegistryState.SENT, None)
        if not entry.can_transition(RegistryState.RECONCILED):
            logger.debug("registry: %s in %s cannot reconcile", temp_id, entry.state.value)
            return None

        now = self._now()
        entry.server_id = server_id
        entry.reconciled_at = now
        entry.message.id = server_id
        self._server_ids[server_id] = temp_id
        self._record(entry, RegistryState.RECONCILED, dict(payload or {}, server_id=server_id))
        self._reconcile_durations.append(max(0.0, now - entry.registered_at))
        logger.debug("registry: reconciled %s -> %s", temp_id, server_id)
        return entry

    def reconcile_by_content(
        self,
        content: str,
        server_id: str,
        payload: dict[str, Any] | None = None,
        threshold: float | None = None,
    ) -> RegistryEntry | None:
        """Reconcile the most recent unreconciled entry whose content matches.

        Last resort for acknowledgments that carry no correlation id.
        """
        limit = self.similarity_threshold if threshold is None else float(threshold)
        for entry in reversed(list(self._entries.values())):
            if entry.is_reconciled or entry.state is RegistryState.FAILED:
                continue
            score = content_similarity(entry.message.content, content)
            if score >= limit:
                logger.debug("registry: content match %s score=%.2f", entry.temp_id, score)
                return self.reconcile_message(entry.temp_id, server_id, payload)
        return None

    # ------------------------------------------------------------------
    # Housekeeping
    # ------------------------------------------------------------------

    def cleanup_orphans(self, max_age_s: float | None = None) -> int:
        """Drop unreconciled entries older than ``max_age_s``.

        Also trims the oldest unreconciled entries beyond ``max_orphans``.
        Returns the number of entries removed.
        """
        age_limit = self.orphan_timeout_s if max_age_s is None else float(max_age_s)
        cutoff = self._now() - age_limit
        stale = [
            entry.temp_id
            for entry in self._entries.values()
            if not entry.is_reconciled and entry.registered_at < cutoff
        ]
        for temp_id in stale:
            del self._entries[temp_id]

        unreconciled = [entry.temp_id for entry in self._entries.values() if not entry.is_reconciled]
        overflow = unreconciled[: max(0, len(unreconciled) - self.max_orphans)]
        for temp_id in overflow:
            del self._entries[temp_id]

        removed = len(stale) + len(overflow)
        if removed:
            self._orphaned += removed
            logger.info("registry: removed %d orphaned entries", removed)
        return removed

    def stats(self) -> RegistryStats:
        entries = self._entries.values()
        durations = self._reconcile_durations
        return RegistryStats(
            total=len(self._entries),
            reconciled=sum(1 for e in entries if e.is_reconciled),
            failed=sum(1 for e in entries if e.state is RegistryState.FAILED),
            orphaned=self._orphaned,
            pending=sum(1 for e in entries if e.state in _PENDING_STATES),
            average_reconcile_s=(sum(durations) / len(durations)) if durations else 0.0,
        )


__all__ = ["MessageRegistry"]
