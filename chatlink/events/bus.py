"""Typed publish/subscribe over event kinds.

Subscriptions are keyed by (kind, handler). Subscribing the same handler to
the same kind twice is a no-op, so a component that re-initializes and
re-registers its handlers never receives an event twice. Bound methods
compare equal when they wrap the same function on the same instance, so
``bus.subscribe(kind, self.on_event)`` is idempotent as well.

Handlers may be sync or async. A failing handler is logged and never stops
delivery to the remaining handlers.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from chatlink.helpers.tasks import BackgroundTasks

from .kinds import EventKind, kind_name
from .payloads import Event

logger = logging.getLogger(__name__)

Handler = Callable[[Event], Any]
WILDCARD = "*"


class EventBus:
    """In-process dispatcher for canonical events."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = {}
        self._tasks = BackgroundTasks("events")

    def subscribe(self, kind: EventKind | str, handler: Handler) -> Callable[[], bool]:
        """Register ``handler`` for ``kind`` and return an unsubscribe callable."""
        key = kind_name(kind)
        handlers = self._handlers.setdefault(key, [])
        if handler in handlers:
            logger.debug("events: handler %r already subscribed to %s", handler, key)
        else:
            handlers.append(handler)
        return lambda: self.unsubscribe(key, handler)

    def subscribe_all(self, handler: Handler) -> Callable[[], bool]:
        """Receive every published event, known or not."""
        return self.subscribe(WILDCARD, handler)

    def unsubscribe(self, kind: EventKind | str, handler: Handler) -> bool:
        key = kind_name(kind)
        handlers = self._handlers.get(key)
        if not handlers or handler not in handlers:
            return False
        handlers.remove(handler)
        if not handlers:
            del self._handlers[key]
        return True

    def publish(self, event: Event) -> int:
        """Deliver ``event`` to its subscribers; return how many were called."""
        key = event.name
        handlers = list(self._handlers.get(key, ())) + list(self._handlers.get(WILDCARD, ()))
        for handler in handlers:
            try:
                result = handler(event)
            except Exception:
                logger.exception("events: handler %r failed for %s", handler, key)
                continue
            self._tasks.run_result(result, label=key)
        return len(handlers)

    def emit(self, kind: EventKind | str, payload: Any = None, **fields: Any) -> int:
        """Build and publish a local event."""
        return self.publish(Event(kind=kind, payload=payload, **fields))

    def listener_count(self, kind: EventKind | str | None = None) -> int:
        if kind is None:
            return sum(len(handlers) for handlers in self._handlers.values())
        return len(self._handlers.get(kind_name(kind), ()))

    def clear(self) -> None:
        self._handlers.clear()

    async def aclose(self) -> None:
        await self._tasks.cancel_all()


__all__ = ["EventBus", "Handler", "WILDCARD"]
