"""Session coordinator: the surface a chat UI talks to.

The coordinator wires the connection manager, message registry, stream
assembler and typing throttle together around one active chat session:

1. ``initialize``: probe platform readiness, create (or join) a chat,
   open the socket and wait for the server's ready signal. Concurrent calls
   share one in-flight initialization.
2. ``send_message``: validate, register under a temporary id, show the
   message optimistically, transmit, and reconcile the id once the server
   acknowledges it. Each send owns a timeout that marks it FAILED.
3. Inbound events: acknowledgments, processing notices, streamed
   responses, typing indicators and server errors update the message list,
   and every visible change is published as ``message_updated``.
4. ``disconnect``: tear everything down. Idempotent.

All inbound handlers are synchronous and run on the event loop thread, so
each one observes and mutates state atomically. Coroutines that await I/O
check the lifecycle generation when they resume.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Any

from chatlink.config.session import (
    SESSION_READY_TIMEOUT_S,
    READINESS_PROBE_ATTEMPTS,
    READINESS_PROBE_DELAY_S,
    SESSION_CREATE_MAX_RETRIES,
    SESSION_CREATE_RETRY_DELAY_S,
    SESSION_ALLOW_DEGRADED,
    MESSAGE_TIMEOUT_S,
    MESSAGE_MAX_LENGTH,
    REGISTRY_CLEANUP_INTERVAL_S,
)
from chatlink.config.websocket import CHAT_TENANT_ID
from chatlink.errors import (
    ChatClientError,
    ConnectionNotReadyError,
    MessageTimeoutError,
    RateLimitError,
    ReadyTimeoutError,
    ServerReportedError,
    SessionClosedError,
    StreamTimeoutError,
    TransportError,
    ValidationError,
)
from chatlink.events import (
    Event,
    EventBus,
    EventKind,
    InitializationProgress,
    MessageReceived,
    Processing,
    RateLimitExceeded,
    ReconnectionStopped,
    ResponseChunk,
    ResponseComplete,
    ResponseStart,
    ServerError,
    TypingIndicator,
)
from chatlink.helpers.timers import Timers
from chatlink.logging import log_context, set_log_context
from chatlink.messages import MessageRegistry, StreamAssembler
from chatlink.services.platform import PlatformClient, PlatformService
from chatlink.state import (
    ChatSession,
    ConnectionState,
    ConnectionStateChange,
    InitializeOptions,
    Message,
    MessageRole,
    MessageStatus,
    RegistryEntry,
    RegistryState,
    TypingStats,
)
from chatlink.transport import ConnectionManager

from .initialization import create_session_with_retries, wait_for_platform_ready
from .lifecycle import SessionLifecycle
from .typing_throttle import TypingThrottle

logger = logging.getLogger(__name__)

_READY_TIMER = "ready"
_CLEANUP_TIMER = "registry:cleanup"
_MESSAGE_TIMER_PREFIX = "message:"

MESSAGE_TIMEOUT_REASON = "message_timeout"
SEND_FAILED_REASON = "send_failed"
SESSION_CLOSED_REASON = "session_closed"

AI_PROCESSING_ERROR = "ai_processing_error"
MESSAGE_VALIDATION_ERROR = "message_validation_error"

_UNACKED_STATES = frozenset({RegistryState.CREATED, RegistryState.SENDING})
_IDLE_CONNECTION_STATES = frozenset({ConnectionState.DISCONNECTED, ConnectionState.FAILED})


def _message_timer(temp_id: str) -> str:
    return f"{_MESSAGE_TIMER_PREFIX}{temp_id}"


def _rejoin_options(session: ChatSession, options: InitializeOptions | None) -> InitializeOptions:
    options = options or InitializeOptions()
    if options.chat_id or not session.chat_id:
        return options
    return replace(
        options,
        chat_id=session.chat_id,
        session_id=options.session_id or session.session_id,
        visitor_id=options.visitor_id or session.visitor_id,
    )


class SessionCoordinator:
    """Top-level orchestration for one chat session.

    Attributes:
        bus: Shared event bus; subscribe here for ``message_updated``,
            ``session_error`` and connection lifecycle events.
        connection: The WebSocket connection manager.
        registry: Outbound message registry.
        typing_users: Users the server currently reports as typing.
        initialization_status: Last ``initialization_progress`` payload.
        last_error: Most recent error surfaced as ``session_error``.
    """

    def __init__(
        self,
        *,
        tenant_id: str = CHAT_TENANT_ID,
        platform: PlatformService | None = None,
        connection: ConnectionManager | None = None,
        registry: MessageRegistry | None = None,
        ready_timeout_s: float = SESSION_READY_TIMEOUT_S,
        message_timeout_s: float = MESSAGE_TIMEOUT_S,
        max_message_length: int = MESSAGE_MAX_LENGTH,
        allow_degraded: bool = SESSION_ALLOW_DEGRADED,
        probe_attempts: int = READINESS_PROBE_ATTEMPTS,
        probe_delay_s: float = READINESS_PROBE_DELAY_S,
        create_max_retries: int = SESSION_CREATE_MAX_RETRIES,
        create_retry_delay_s: float = SESSION_CREATE_RETRY_DELAY_S,
        cleanup_interval_s: float = REGISTRY_CLEANUP_INTERVAL_S,
        typing: TypingThrottle | None = None,
        assembler: StreamAssembler | None = None,
    ) -> None:
        self.tenant_id = tenant_id
        self.connection = connection or ConnectionManager(tenant_id=tenant_id)
        self.bus: EventBus = self.connection.bus
        self.platform: PlatformService = platform or PlatformClient(tenant_id=tenant_id)
        self.registry = registry or MessageRegistry()
        self.ready_timeout_s = float(ready_timeout_s)
        self.message_timeout_s = float(message_timeout_s)
        self.max_message_length = int(max_message_length)
        self.allow_degraded = bool(allow_degraded)
        self.probe_attempts = int(probe_attempts)
        self.probe_delay_s = float(probe_delay_s)
        self.create_max_retries = int(create_max_retries)
        self.create_retry_delay_s = float(create_retry_delay_s)
        self.cleanup_interval_s = float(cleanup_interval_s)

        self._timers = Timers("session")
        self._lifecycle = SessionLifecycle()
        self.assembler = assembler or StreamAssembler(
            on_update=self._publish_update,
            on_expired=self._on_stream_expired,
            timers=self._timers,
        )
        self.typing = typing or TypingThrottle(
            on_start=lambda: self._signal_typing(True),
            on_stop=lambda: self._signal_typing(False),
            timers=self._timers,
        )

        self._session: ChatSession | None = None
        self._messages: list[Message] = []
        self._init_task: asyncio.Task | None = None
        self._ready_event: asyncio.Event | None = None
        self._ready_error: ChatClientError | None = None

        self.typing_users: set[str] = set()
        self.initialization_status: InitializationProgress | None = None
        self.last_error: ChatClientError | None = None

        self._subscribe()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def session(self) -> ChatSession | None:
        return self._session

    @property
    def messages(self) -> list[Message]:
        return list(self._messages)

    @property
    def connection_state(self) -> ConnectionState:
        return self.connection.state

    @property
    def is_ready(self) -> bool:
        return self._session is not None and self.connection.is_ready

    def pending_timers(self) -> list[str]:
        """Keys of every armed timer, session and connection alike."""
        return self._timers.keys() + self.connection.pending_timers()

    def typing_stats(self) -> TypingStats:
        return self.typing.stats()

    def _subscribe(self) -> None:
        handlers = {
            EventKind.STATE_CHANGED: self._on_state_changed,
            EventKind.RECONNECTION_STOPPED: self._on_reconnection_stopped,
            EventKind.MESSAGE_RECEIVED: self._on_message_received,
            EventKind.PROCESSING: self._on_processing,
            EventKind.RESPONSE_START: self._on_response_start,
            EventKind.RESPONSE_CHUNK: self._on_response_chunk,
            EventKind.RESPONSE_COMPLETE: self._on_response_complete,
            EventKind.TYPING_INDICATOR: self._on_typing_indicator,
            EventKind.INITIALIZATION_PROGRESS: self._on_initialization_progress,
            EventKind.RATE_LIMIT_EXCEEDED: self._on_rate_limited,
            EventKind.ERROR: self._on_server_error,
        }
        for kind, handler in handlers.items():
            self.bus.subscribe(kind, handler)

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    async def initialize(self, options: InitializeOptions | None = None) -> ChatSession:
        """Start a session, or return the active one.

        A session whose connection ended up DISCONNECTED or FAILED is not
        returned as is: initialization runs again, rejoining the same chat.

        Raises:
            SessionCreationError: The session service refused (non-retryable),
                or creation failed and degraded mode is off.
            AuthenticationError: The socket handshake was rejected.
            ConfigurationError: Missing tenant or invalid endpoint.
            ReadyTimeoutError: The server never signaled ready.
            SessionClosedError: ``disconnect()`` ran during initialization.
        """
        session = self._session
        if session is not None and self._lifecycle.is_open and self._init_task is None:
            if self.connection.state not in _IDLE_CONNECTION_STATES:
                return session
            logger.info(
                "session: connection %s; re-initializing chat=%s",
                self.connection.state.value,
                session.chat_id,
            )
            options = _rejoin_options(session, options)
        task = self._init_task
        if task is None:
            task = asyncio.ensure_future(self._initialize(options or InitializeOptions()))
            self._init_task = task
            task.add_done_callback(self._clear_init_task)
        else:
            logger.debug("session: joining in-flight initialization")
        return await asyncio.shield(task)

    def _clear_init_task(self, task: asyncio.Task) -> None:
        if self._init_task is task:
            self._init_task = None

    async def _initialize(self, options: InitializeOptions) -> ChatSession:
        generation = self._lifecycle.open()
        self._ready_event = asyncio.Event()
        self._ready_error = None
        allow_degraded = self.allow_degraded if options.allow_degraded is None else options.allow_degraded
        try:
            if options.chat_id:
                session = ChatSession(
                    chat_id=options.chat_id,
                    tenant_id=self.tenant_id,
                    session_id=options.session_id,
                    visitor_id=options.visitor_id,
                    title=options.title,
                )
            else:
                await wait_for_platform_ready(
                    self.platform,
                    attempts=self.probe_attempts,
                    delay_s=self.probe_delay_s,
                )
                self._lifecycle.ensure_current(generation, "readiness probe")
                session = await create_session_with_retries(
                    self.platform,
                    tenant_id=self.tenant_id,
                    session_id=options.session_id,
                    visitor_id=options.visitor_id,
                    title=options.title,
                    max_retries=self.create_max_retries,
                    retry_delay_s=self.create_retry_delay_s,
                    allow_degraded=allow_degraded,
                )
                self._lifecycle.ensure_current(generation, "session creation")

            self._session = session
            set_log_context(chat_id=session.chat_id or "-")
            self._arm_registry_cleanup(generation)
            logger.info(
                "session: initializing chat=%s degraded=%s tenant=%s",
                session.chat_id,
                session.degraded,
                self.tenant_id,
            )
            self._timers.schedule(_READY_TIMER, self.ready_timeout_s, lambda: self._on_ready_timeout(generation))
            opened = await self.connection.connect(session.chat_id)
            self._lifecycle.ensure_current(generation, "connect")
            if not opened:
                logger.info("session: first connect failed; waiting on reconnect chat=%s", session.chat_id)
            if self.connection.is_ready:
                self._mark_ready()
            if options.wait_for_ready:
                await self._wait_ready(generation)
            return session
        except ChatClientError as exc:
            if self._lifecycle.is_current(generation):
                await self._abort_initialize(exc)
            raise

    async def _wait_ready(self, generation: int) -> None:
        event = self._ready_event
        if event is None:
            raise SessionClosedError("session closed during initialization")
        await event.wait()
        if self._ready_error is not None:
            raise self._ready_error
        self._lifecycle.ensure_current(generation, "ready wait")

    def _mark_ready(self, error: ChatClientError | None = None) -> None:
        self._timers.cancel(_READY_TIMER)
        event = self._ready_event
        if event is None or event.is_set():
            return
        self._ready_error = error
        event.set()

    async def _on_ready_timeout(self, generation: int) -> None:
        if not self._lifecycle.is_current(generation) or self.connection.is_ready:
            return
        err = ReadyTimeoutError(
            f"server not ready within {self.ready_timeout_s:.1f}s",
            timeout_s=self.ready_timeout_s,
        )
        logger.error(
            "session: ready timeout chat=%s state=%s",
            self._session.chat_id if self._session else None,
            self.connection.state.value,
        )
        await self.connection.fail("ready_timeout")
        self._report_error(err)
        self._mark_ready(err)

    async def _abort_initialize(self, exc: ChatClientError) -> None:
        logger.error("session: initialization failed (%s): %s", type(exc).__name__, exc)
        self._timers.cancel(_READY_TIMER)
        self._timers.cancel(_CLEANUP_TIMER)
        self._lifecycle.close()
        self._session = None
        if self.last_error is not exc:
            self._report_error(exc)
        if self.connection.state not in _IDLE_CONNECTION_STATES:
            await self.connection.fail(type(exc).__name__)

    def _arm_registry_cleanup(self, generation: int) -> None:
        if self.cleanup_interval_s <= 0:
            return
        self._timers.schedule(
            _CLEANUP_TIMER,
            self.cleanup_interval_s,
            lambda: self._on_registry_cleanup(generation),
        )

    def _on_registry_cleanup(self, generation: int) -> None:
        if not self._lifecycle.is_current(generation):
            return
        self.registry.cleanup_orphans()
        self._arm_registry_cleanup(generation)

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    def _require_sendable(self) -> ChatSession:
        session = self._session
        if session is None or not self._lifecycle.is_open:
            raise ValidationError("no_active_session", "no active chat session; call initialize() first")
        if not self.connection.is_ready:
            raise ConnectionNotReadyError(self.connection.state.value)
        return session

    async def send_message(self, content: str, metadata: dict[str, Any] | None = None) -> Message:
        """Send a user message and return its optimistic record.

        The returned message is updated in place as the server acknowledges
        it (SENT, with the server id) or as it fails (FAILED).

        Raises:
            ValidationError: No session, empty or oversized content.
            ConnectionNotReadyError: The connection is not READY.
        """
        session = self._require_sendable()
        text = content.strip() if isinstance(content, str) else ""
        if not text:
            raise ValidationError("empty_message", "message content is empty")
        if len(text) > self.max_message_length:
            raise ValidationError(
                "message_too_long",
                f"message is {len(text)} characters; the limit is {self.max_message_length}",
            )
        return await self._transmit(session, text, metadata)

    async def _transmit(self, session: ChatSession, text: str, metadata: dict[str, Any] | None) -> Message:
        draft = Message(id=None, role=MessageRole.USER, content=text, status=MessageStatus.SENDING)
        if metadata:
            draft.metadata.extra.update(metadata)
        entry = self.registry.register_message(draft, {"chat_id": session.chat_id})
        temp_id = entry.temp_id
        self.registry.update_message_state(temp_id, RegistryState.SENDING)
        self._messages.append(draft)
        self._publish_update(draft)
        self.typing.force_stop()
        self._timers.schedule(
            _message_timer(temp_id),
            self.message_timeout_s,
            lambda: self._on_message_timeout(temp_id),
        )

        generation = self._lifecycle.generation
        with log_context(message_id=temp_id):
            try:
                await self.connection.send_chat_message(
                    text,
                    chat_id=session.chat_id,
                    client_message_id=temp_id,
                    metadata=metadata,
                )
            except ChatClientError as exc:
                if self._lifecycle.is_current(generation):
                    logger.warning("session: transmit failed for %s: %s", temp_id, exc)
                    self._fail_outbound(entry, SEND_FAILED_REASON)
                return draft
            logger.debug("session: transmitted %s chars=%d", temp_id, len(text))
        return draft

    async def retry_message(self, message_id: str) -> Message:
        """Resend a FAILED user message under a fresh temporary id.

        Raises:
            ValidationError: The message is unknown or not FAILED.
            ConnectionNotReadyError: The connection is not READY.
        """
        entry = self.registry.get(message_id)
        message = entry.message if entry is not None else self._find_message(message_id)
        if message is None or message.role is not MessageRole.USER or message.status is not MessageStatus.FAILED:
            raise ValidationError("message_not_retryable", f"message {message_id} is not a failed user message")
        self._require_sendable()
        if entry is not None:
            self._timers.cancel(_message_timer(entry.temp_id))
            self.registry.remove(entry.temp_id)
        self._remove_message(message)
        logger.info("session: retrying %s", message_id)
        return await self.send_message(message.content, metadata=dict(message.metadata.extra) or None)

    def _on_message_timeout(self, temp_id: str) -> None:
        entry = self.registry.get(temp_id)
        if entry is None or entry.state not in _UNACKED_STATES:
            return
        logger.warning("session: no acknowledgment for %s within %.1fs", temp_id, self.message_timeout_s)
        self._fail_outbound(entry, MESSAGE_TIMEOUT_REASON)
        self._report_error(
            MessageTimeoutError(f"message {temp_id} was not acknowledged", timeout_s=self.message_timeout_s)
        )

    def _fail_outbound(self, entry: RegistryEntry, reason: str) -> None:
        self._timers.cancel(_message_timer(entry.temp_id))
        if entry.state is RegistryState.FAILED or not entry.can_transition(RegistryState.FAILED):
            return
        self.registry.update_message_state(entry.temp_id, RegistryState.FAILED, {"error": reason})
        entry.message.status = MessageStatus.FAILED
        entry.message.metadata.error = reason
        self._publish_update(entry.message)

    # ------------------------------------------------------------------
    # Acknowledgments
    # ------------------------------------------------------------------

    def _find_outbound(self, client_message_id: str | None, server_id: str | None) -> RegistryEntry | None:
        return self.registry.get(client_message_id) or self.registry.get(server_id)

    def _oldest_unacked(self) -> RegistryEntry | None:
        pending = self.registry.pending_entries()
        return pending[0] if pending else None

    def _acknowledge(self, entry: RegistryEntry, server_id: str | None, *, received: bool) -> None:
        self._timers.cancel(_message_timer(entry.temp_id))
        if entry.state is RegistryState.FAILED:
            logger.info("session: late acknowledgment for failed %s ignored", entry.temp_id)
            return
        if entry.state is RegistryState.CREATED:
            self.registry.update_message_state(entry.temp_id, RegistryState.SENDING)
        if entry.state is RegistryState.SENDING:
            self.registry.update_message_state(entry.temp_id, RegistryState.SENT)
        if received and entry.can_transition(RegistryState.RECEIVED):
            self.registry.update_message_state(entry.temp_id, RegistryState.RECEIVED)
        if server_id and not entry.is_reconciled:
            self.registry.reconcile_message(entry.temp_id, server_id)
        message = entry.message
        if message.status is MessageStatus.SENDING:
            message.status = MessageStatus.SENT
        self._publish_update(message)

    def _is_foreign(self, event: Event) -> bool:
        session = self._session
        if not self._lifecycle.is_open or session is None:
            return True
        return bool(event.chat_id and session.chat_id and event.chat_id != session.chat_id)

    def _on_message_received(self, event: Event) -> None:
        if self._is_foreign(event):
            return
        payload: MessageReceived = event.payload
        entry = self._find_outbound(payload.client_message_id, payload.message_id)
        if entry is None and payload.client_message_id:
            logger.debug("session: acknowledgment for unknown client id %s", payload.client_message_id)
            return
        if entry is None and payload.content and payload.message_id:
            entry = self.registry.reconcile_by_content(payload.content, payload.message_id)
        if entry is None:
            entry = self._oldest_unacked()
        if entry is None:
            logger.debug("session: acknowledgment %s matches no outbound message", payload.message_id)
            return
        self._acknowledge(entry, payload.message_id, received=True)

    def _on_processing(self, event: Event) -> None:
        if self._is_foreign(event):
            return
        payload: Processing = event.payload
        entry = self._find_outbound(payload.client_message_id, payload.message_id) or self._oldest_unacked()
        if entry is None:
            entry = self._latest_unprocessed()
        if entry is None or entry.state is RegistryState.FAILED:
            return
        if entry.state in _UNACKED_STATES:
            self._acknowledge(entry, None, received=False)
        if entry.can_transition(RegistryState.DELIVERED):
            self.registry.update_message_state(entry.temp_id, RegistryState.DELIVERED)
        entry.message.status = MessageStatus.DELIVERED
        self._publish_update(entry.message)

    def _latest_unprocessed(self) -> RegistryEntry | None:
        for message in reversed(self._messages):
            if message.role is MessageRole.USER and message.status is MessageStatus.SENT:
                return self.registry.get(message.id)
        return None

    # ------------------------------------------------------------------
    # Assistant responses
    # ------------------------------------------------------------------

    def _on_response_start(self, event: Event) -> None:
        if self._is_foreign(event):
            return
        payload: ResponseStart = event.payload
        entry = self.registry.get(payload.client_message_id) or self._oldest_unacked()
        if entry is not None and entry.state in _UNACKED_STATES:
            self._acknowledge(entry, None, received=False)
        if not payload.message_id:
            logger.debug("session: response_start without message id")
            return
        message = self.assembler.start(payload.message_id)
        if self._upsert(message):
            self._publish_update(message)

    def _on_response_chunk(self, event: Event) -> None:
        if self._is_foreign(event):
            return
        payload: ResponseChunk = event.payload
        if not payload.message_id:
            logger.warning("session: response_chunk without message id dropped")
            return
        message = self.assembler.append(payload.message_id, payload.content)
        if self._upsert(message):
            self._publish_update(message)

    def _on_response_complete(self, event: Event) -> None:
        if self._is_foreign(event):
            return
        payload: ResponseComplete = event.payload
        if payload.client_message_id:
            entry = self.registry.get(payload.client_message_id)
            if entry is not None and entry.state in _UNACKED_STATES:
                self._acknowledge(entry, None, received=False)
        if not self.assembler.has_buffer(payload.message_id):
            existing = self._find_message(payload.message_id)
            if existing is not None and existing.status is MessageStatus.RECEIVED:
                logger.debug("session: repeated completion for %s ignored", payload.message_id)
                return
        message = self.assembler.complete(payload)
        self._upsert(message)
        self._publish_update(message)

    def _on_stream_expired(self, message: Message) -> None:
        self._publish_update(message)
        self._report_error(
            StreamTimeoutError(f"response {message.id} stopped streaming", timeout_s=self.assembler.expiry_s)
        )

    # ------------------------------------------------------------------
    # Indicators, progress and errors
    # ------------------------------------------------------------------

    def _on_typing_indicator(self, event: Event) -> None:
        if self._is_foreign(event):
            return
        payload: TypingIndicator = event.payload
        user = payload.user_id or MessageRole.ASSISTANT.value
        if payload.is_typing:
            self.typing_users.add(user)
        else:
            self.typing_users.discard(user)

    def _on_initialization_progress(self, event: Event) -> None:
        payload: InitializationProgress = event.payload
        self.initialization_status = payload
        logger.info("session: platform initializing phase=%s %s", payload.phase, payload.message or "")

    def _on_rate_limited(self, event: Event) -> None:
        if not self._lifecycle.is_open:
            return
        payload: RateLimitExceeded = event.payload
        self._report_error(RateLimitError(retry_in=payload.retry_after, message=payload.message))

    def _on_server_error(self, event: Event) -> None:
        if self._is_foreign(event):
            return
        payload: ServerError = event.payload
        if payload.error_type == AI_PROCESSING_ERROR:
            targets = [payload.message_id] if self.assembler.has_buffer(payload.message_id) else self.assembler.active_ids()
            for message_id in targets:
                message = self.assembler.fail(message_id, AI_PROCESSING_ERROR)
                if message is not None:
                    self._publish_update(message)
        elif payload.error_type == MESSAGE_VALIDATION_ERROR:
            entry = self._find_outbound(payload.client_message_id, payload.message_id) or self._oldest_unacked()
            if entry is not None:
                self._fail_outbound(entry, MESSAGE_VALIDATION_ERROR)
        self._report_error(ServerReportedError(payload.error_type, payload.message, message_id=payload.message_id))

    def _on_state_changed(self, event: Event) -> None:
        change: ConnectionStateChange = event.payload
        if change.current is ConnectionState.READY and self._lifecycle.is_open:
            logger.info("session: connection ready chat=%s", self._session.chat_id if self._session else None)
            self._mark_ready()

    def _on_reconnection_stopped(self, event: Event) -> None:
        if not self._lifecycle.is_open:
            return
        payload: ReconnectionStopped = event.payload
        err = TransportError(f"connection lost: {payload.reason}", error_class=payload.error_class)
        self._mark_ready(err)
        self._report_error(err)

    def _report_error(self, exc: ChatClientError) -> None:
        self.last_error = exc
        self.bus.emit(
            EventKind.SESSION_ERROR,
            exc,
            chat_id=self._session.chat_id if self._session else None,
        )

    # ------------------------------------------------------------------
    # Typing
    # ------------------------------------------------------------------

    def start_typing(self) -> bool:
        if not self.is_ready:
            return False
        return self.typing.start_typing()

    def stop_typing(self) -> bool:
        if not self.is_ready:
            return False
        return self.typing.stop_typing()

    def _signal_typing(self, is_typing: bool) -> Any:
        if not self._lifecycle.is_open or self._session is None or not self.connection.is_ready:
            return None
        return self._send_typing(self._session.chat_id, is_typing)

    async def _send_typing(self, chat_id: str | None, is_typing: bool) -> None:
        try:
            await self.connection.send_typing(chat_id, is_typing)
        except ChatClientError as exc:
            logger.debug("session: typing signal dropped: %s", exc)

    # ------------------------------------------------------------------
    # Chat switching and teardown
    # ------------------------------------------------------------------

    async def switch_chat(self, chat_id: str) -> ChatSession:
        """Leave the current chat and join ``chat_id`` on the same socket.

        Raises:
            ValidationError: No active session or an empty chat id.
            ConnectionNotReadyError: The connection is not READY.
        """
        session = self._require_sendable()
        if not chat_id:
            raise ValidationError("invalid_chat_id", "chat id is required")
        if chat_id == session.chat_id:
            return session
        self.typing.force_stop()
        for message in self.assembler.discard_all():
            logger.debug("session: discarded stream %s on chat switch", message.id)
        previous = session.chat_id
        if previous:
            await self.connection.leave_chat(previous)
        await self.connection.join_chat(chat_id)
        self._session = replace(session, chat_id=chat_id, degraded=False)
        self.typing_users.clear()
        set_log_context(chat_id=chat_id)
        logger.info("session: switched chat %s -> %s", previous, chat_id)
        return self._session

    async def disconnect(self) -> None:
        """Tear the session down. Safe to call any number of times."""
        session = self._session
        was_open = self._lifecycle.close()
        if self.typing.signaling and session is not None and self.connection.is_ready:
            await self._send_typing(session.chat_id, False)
        self.typing.force_stop()
        self._timers.cancel_all()
        for entry in self.registry.pending_entries():
            self._fail_outbound(entry, SESSION_CLOSED_REASON)
        self.assembler.discard_all()
        self._mark_ready(SessionClosedError("session closed"))
        await self.connection.disconnect()
        await self.typing.aclose()
        self.typing.reset()
        self._session = None
        self._messages.clear()
        self.registry.clear()
        self._ready_event = None
        self._ready_error = None
        self.typing_users.clear()
        self.initialization_status = None
        if was_open:
            logger.info("session: disconnected")

    async def aclose(self) -> None:
        """Disconnect and release the HTTP client and background tasks."""
        await self.disconnect()
        await self.bus.aclose()
        close = getattr(self.platform, "aclose", None)
        if close is not None:
            await close()

    # ------------------------------------------------------------------
    # Message list
    # ------------------------------------------------------------------

    def _publish_update(self, message: Message) -> None:
        self.bus.emit(
            EventKind.MESSAGE_UPDATED,
            message,
            chat_id=self._session.chat_id if self._session else None,
        )

    def _find_message(self, message_id: str | None) -> Message | None:
        if not message_id:
            return None
        for message in reversed(self._messages):
            if message.id == message_id:
                return message
        return None

    def _upsert(self, message: Message) -> bool:
        """Insert or replace by id. Returns True when the list changed."""
        for index, existing in enumerate(self._messages):
            if existing is message:
                return False
            if existing.id == message.id:
                self._messages[index] = message
                return True
        self._messages.append(message)
        return True

    def _remove_message(self, message: Message) -> None:
        self._messages = [existing for existing in self._messages if existing is not message]


__all__ = [
    "SessionCoordinator",
    "MESSAGE_TIMEOUT_REASON",
    "SEND_FAILED_REASON",
    "SESSION_CLOSED_REASON",
]
