"""Chat session identity and initialization options."""

from __future__ import annotations

from datetime import datetime, timezone
from dataclasses import field, dataclass

from chatlink.config.session import SESSION_TITLE


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ChatSession:
    """The active conversation bound to a coordinator.

    ``chat_id`` is None in degraded mode, when the session service could not
    issue an id and the socket was opened tenant-only.
    """

    chat_id: str | None
    tenant_id: str
    created_at: datetime = field(default_factory=_utcnow)
    degraded: bool = False
    session_id: str | None = None
    visitor_id: str | None = None
    title: str = SESSION_TITLE

    @property
    def id(self) -> str | None:
        return self.chat_id


@dataclass
class InitializeOptions:
    """Per-call overrides for ``SessionCoordinator.initialize``.

    Attributes:
        chat_id: Join an existing chat instead of creating one.
        title: Title sent to the session service.
        session_id: Client session identifier; generated when omitted.
        visitor_id: Visitor identifier; generated when omitted.
        allow_degraded: Override the coordinator's degraded-mode default.
        wait_for_ready: Return only once the server signals ready.
    """

    chat_id: str | None = None
    title: str = SESSION_TITLE
    session_id: str | None = None
    visitor_id: str | None = None
    allow_degraded: bool | None = None
    wait_for_ready: bool = True


__all__ = ["ChatSession", "InitializeOptions"]
