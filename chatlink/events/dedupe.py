"""Recent-event fingerprint window.

Servers replay frames after reconnects and some deployments emit the same
completion twice. Events whose fingerprint was seen within ``window_s`` are
reported as duplicates and dropped by the connection manager.

Fingerprint:
    (wire type, message_id, chat_id, wire event timestamp, first N content chars)

The wire type is the frame's own type name, so aliases that share a kind
(``typing_start`` and ``typing_stop``) never collide. Local events fall back
to the kind name.

Always admitted:
    - streamed chunks without a wire timestamp: repeated fragments
      ("ha", "ha") are legitimate content and nothing else tells them apart
    - ``connection_established`` and ``connection_ready``: every socket sends
      its own, including one opened right after a reconnect

Completions and every other kind are still deduplicated.

The window is bounded both in time and in size; the oldest fingerprints are
evicted first.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass

from chatlink.config.websocket import (
    WS_DEDUP_WINDOW_S,
    WS_DEDUP_MAX_ENTRIES,
    WS_DEDUP_CONTENT_PREFIX,
)

from .kinds import EventKind
from .normalizer import TYPE_KEYS
from .payloads import Event

TimeFn = Callable[[], float]

_HANDSHAKE_KINDS = frozenset({EventKind.CONNECTION_ESTABLISHED, EventKind.CONNECTION_READY})


@dataclass(frozen=True)
class DedupStats:
    tracked: int
    dropped: int
    window_s: float


def _wire_type(event: Event) -> str:
    for key in TYPE_KEYS:
        value = event.raw.get(key)
        if isinstance(value, str) and value:
            return value
    return event.name


class EventDeduplicator:
    """Drop events already seen inside a short sliding window."""

    def __init__(
        self,
        *,
        window_s: float = WS_DEDUP_WINDOW_S,
        max_entries: int = WS_DEDUP_MAX_ENTRIES,
        content_prefix: int = WS_DEDUP_CONTENT_PREFIX,
        now_fn: TimeFn | None = None,
    ) -> None:
        self.window_s = max(0.0, float(window_s))
        self.max_entries = max(1, int(max_entries))
        self.content_prefix = max(0, int(content_prefix))
        self._now = now_fn or time.monotonic
        self._seen: OrderedDict[str, float] = OrderedDict()
        self._dropped = 0

    def fingerprint(self, event: Event) -> str:
        content = (event.content or "")[: self.content_prefix]
        parts = (
            _wire_type(event),
            event.message_id or "",
            event.chat_id or "",
            "" if event.event_ts is None else str(event.event_ts),
            content,
        )
        return "\x1f".join(parts)

    def is_duplicate(self, event: Event) -> bool:
        """Return True if ``event`` repeats one seen inside the window.

        A first sighting is recorded, so calling this is also how events are
        admitted.
        """
        if self.window_s <= 0:
            return False
        if event.kind in _HANDSHAKE_KINDS:
            return False
        if event.kind is EventKind.RESPONSE_CHUNK and event.event_ts is None:
            return False
        now = self._now()
        self._prune(now)
        key = self.fingerprint(event)
        if key in self._seen:
            self._dropped += 1
            return True
        self._seen[key] = now
        while len(self._seen) > self.max_entries:
            self._seen.popitem(last=False)
        return False

    def _prune(self, now: float) -> None:
        cutoff = now - self.window_s
        while self._seen:
            key, seen_at = next(iter(self._seen.items()))
            if seen_at > cutoff:
                break
            self._seen.popitem(last=False)

    def clear(self) -> None:
        self._seen.clear()

    def stats(self) -> DedupStats:
        return DedupStats(tracked=len(self._seen), dropped=self._dropped, window_s=self.window_s)


__all__ = ["DedupStats", "EventDeduplicator"]
