"""WebSocket connection manager.

This module owns the single chat socket and its lifecycle:

1. Opening: identity (tenant, chat, client, token) travels as URL
   parameters; a rejected handshake is classified by HTTP status.
2. Readiness: CONNECTED becomes READY only when the server sends
   ``connection_ready``. Nothing but pongs may be sent before that.
3. Inbound pipeline: parse -> normalize -> dedupe -> publish on the bus.
   Malformed frames are logged and dropped without closing the socket.
4. Heartbeat: each ``ping`` is answered with a ``pong`` echoing its
   timestamp. The client never pings on its own.
5. Recovery: the close code decides between DISCONNECTED (normal), FAILED
   (auth/tenant) and RECONNECTING with classified exponential backoff.

State changes, reconnect attempts and their outcome are published on the
event bus as local events (``state_changed``, ``reconnecting``,
``reconnection_succeeded``, ``reconnection_stopped``).

Usage:
    manager = ConnectionManager(tenant_id="acme", bus=bus)
    await manager.connect(chat_id)
    ...  # wait for EventKind.CONNECTION_READY
    await manager.send_chat_message("hi", chat_id=chat_id, client_message_id=tmp)
    await manager.disconnect()
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import websockets
from websockets.exceptions import InvalidHandshake, InvalidURI

from chatlink.config.secrets import CHAT_AUTH_TOKEN
from chatlink.config.websocket import (
    CHAT_WS_BASE_URL,
    CHAT_WS_PATH,
    CHAT_TENANT_ID,
    CHAT_CLIENT_ID,
    WS_CONNECT_TIMEOUT_S,
    WS_CLOSE_TIMEOUT_S,
    WS_MAX_MESSAGE_BYTES,
    WS_CLOSE_NORMAL_CODE,
    WS_CLOSE_ABNORMAL_CODE,
    WS_CLOSE_CLIENT_REASON,
)
from chatlink.errors import (
    AuthenticationError,
    ChatClientError,
    ConfigurationError,
    ConnectionClosedError,
    ConnectionNotReadyError,
    ErrorClass,
    InvalidTransitionError,
    ProtocolError,
    TransportError,
    classify_error,
    is_recoverable,
)
from chatlink.events import (
    Event,
    EventBus,
    EventDeduplicator,
    EventKind,
    OutboundType,
    ReconnectAttempt,
    ReconnectionStopped,
    normalize_inbound,
    normalize_outbound,
)
from chatlink.events.dedupe import DedupStats
from chatlink.helpers.tasks import cancel_task
from chatlink.helpers.timers import Timers
from chatlink.logging import set_log_context
from chatlink.state.connection import (
    CONNECTION_TRANSITIONS,
    ConnectionState,
    ConnectionStateChange,
    ReconnectPolicy,
    ReconnectState,
)

from .backoff import RandomFn, compute_reconnect_delay
from .close_codes import classify_close
from .parser import encode_frame, parse_frame
from .urls import build_connection_url, redact_url

logger = logging.getLogger(__name__)

ConnectFn = Callable[[str], Awaitable[Any]]

_RECONNECT_TIMER = "reconnect"


async def open_websocket(url: str) -> Any:
    """Default connector: a websockets client connection with keepalive off.

    Application-level ping/pong is driven by the server; library keepalive
    pings are disabled so the client never originates pings.
    """
    return await websockets.connect(
        url,
        max_queue=None,
        max_size=WS_MAX_MESSAGE_BYTES,
        ping_interval=None,
        open_timeout=None,
        close_timeout=WS_CLOSE_TIMEOUT_S,
    )


def _handshake_status(exc: BaseException) -> int | None:
    response = getattr(exc, "response", None)
    status = getattr(response, "status_code", None)
    if status is None:
        status = getattr(exc, "status_code", None)
    return int(status) if status is not None else None


def handshake_error(exc: BaseException, url: str) -> ChatClientError:
    """Translate a failure to open the socket into the client taxonomy."""
    if isinstance(exc, ChatClientError):
        return exc
    target = redact_url(url)
    if isinstance(exc, InvalidURI):
        return ConfigurationError(f"invalid WebSocket URL {target}")
    if isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
        return TransportError(f"timed out opening {target}", error_class=ErrorClass.NETWORK)
    if isinstance(exc, InvalidHandshake):
        status = _handshake_status(exc)
        if status in (401, 403):
            return AuthenticationError(f"handshake rejected with HTTP {status}")
        if status in (400, 404, 422):
            return ConfigurationError(f"handshake rejected with HTTP {status}")
        if status == 429:
            return TransportError("handshake rate limited", error_class=ErrorClass.RATE_LIMIT)
        if status == 503:
            return TransportError("platform unavailable", error_class=ErrorClass.PLATFORM_INITIALIZING)
        if status is not None and status >= 500:
            return TransportError(f"handshake failed with HTTP {status}", error_class=ErrorClass.SERVER)
        return TransportError(f"handshake failed: {exc}", error_class=ErrorClass.NETWORK)
    return TransportError(f"could not open {target}: {exc}", error_class=ErrorClass.NETWORK)


def _close_details(ws: Any, exc: BaseException | None = None) -> tuple[int, str | None]:
    rcvd = getattr(exc, "rcvd", None)
    if rcvd is not None:
        return rcvd.code, rcvd.reason
    code = getattr(ws, "close_code", None)
    reason = getattr(ws, "close_reason", None)
    return (code if code is not None else WS_CLOSE_ABNORMAL_CODE), reason


class ConnectionManager:
    """Owns the chat WebSocket and its state machine.

    Attributes:
        bus: Event bus receiving inbound events and lifecycle notifications.
        policy: Backoff parameters for reconnection.
    """

    def __init__(
        self,
        *,
        tenant_id: str = CHAT_TENANT_ID,
        base_url: str = CHAT_WS_BASE_URL,
        path: str = CHAT_WS_PATH,
        token: str | None = CHAT_AUTH_TOKEN,
        client_id: str | None = CHAT_CLIENT_ID,
        bus: EventBus | None = None,
        policy: ReconnectPolicy | None = None,
        deduplicator: EventDeduplicator | None = None,
        connect_fn: ConnectFn | None = None,
        connect_timeout_s: float = WS_CONNECT_TIMEOUT_S,
        rng: RandomFn | None = None,
    ) -> None:
        self.bus = bus or EventBus()
        self.policy = policy or ReconnectPolicy()
        self._tenant_id = tenant_id
        self._base_url = base_url
        self._path = path
        self._token = token
        self._client_id = client_id
        self._dedupe = deduplicator or EventDeduplicator()
        self._connect_fn = connect_fn or open_websocket
        self._connect_timeout_s = float(connect_timeout_s)
        self._rng = rng
        self._timers = Timers("connection")
        self._reconnect = ReconnectState()
        self._state = ConnectionState.DISCONNECTED
        self._ws: Any = None
        self._reader: asyncio.Task | None = None
        self._chat_id: str | None = None
        self._generation = 0
        self._closing = False
        self._protocol_errors = 0
        self._reconnect_total = 0

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is ConnectionState.READY

    @property
    def is_open(self) -> bool:
        return self._state in (ConnectionState.CONNECTED, ConnectionState.READY)

    @property
    def client_id(self) -> str | None:
        return self._client_id

    @property
    def chat_id(self) -> str | None:
        return self._chat_id

    @chat_id.setter
    def chat_id(self, value: str | None) -> None:
        """Rebind the chat used by future reconnects (after a join)."""
        self._chat_id = value

    @property
    def tenant_id(self) -> str:
        return self._tenant_id

    @property
    def reconnect_state(self) -> ReconnectState:
        return ReconnectState(
            attempt=self._reconnect.attempt,
            last_error_class=self._reconnect.last_error_class,
            delay_s=self._reconnect.delay_s,
        )

    @property
    def reconnect_total(self) -> int:
        """Reconnect attempts scheduled since construction."""
        return self._reconnect_total

    @property
    def protocol_errors(self) -> int:
        return self._protocol_errors

    def pending_timers(self) -> list[str]:
        return self._timers.keys()

    def dedupe_stats(self) -> DedupStats:
        return self._dedupe.stats()

    def connection_url(self, chat_id: str | None = None) -> str:
        return build_connection_url(
            self._base_url,
            tenant_id=self._tenant_id,
            chat_id=chat_id,
            client_id=self._client_id,
            token=self._token,
            path=self._path,
        )

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    def _transition(
        self,
        target: ConnectionState,
        *,
        reason: str | None = None,
        close_code: int | None = None,
    ) -> None:
        current = self._state
        if target is current:
            return
        if target not in CONNECTION_TRANSITIONS[current]:
            raise InvalidTransitionError("connection", current.value, target.value)
        self._state = target
        logger.info(
            "connection: %s -> %s chat=%s reason=%s code=%s",
            current.value,
            target.value,
            self._chat_id,
            reason,
            close_code,
        )
        self.bus.emit(
            EventKind.STATE_CHANGED,
            ConnectionStateChange(current, target, reason=reason, close_code=close_code),
            chat_id=self._chat_id,
        )

    # ------------------------------------------------------------------
    # Opening
    # ------------------------------------------------------------------

    async def connect(self, chat_id: str | None = None) -> bool:
        """Open the socket bound to ``chat_id`` (tenant-only when None).

        Returns:
            True when the socket opened, False when the attempt failed with a
            recoverable error and a reconnect was scheduled instead.

        Raises:
            ConfigurationError: Missing tenant or invalid URL.
            AuthenticationError: The server rejected the credentials.
        """
        if self.is_open or self._state is ConnectionState.CONNECTING:
            if chat_id == self._chat_id:
                logger.debug("connection: already %s for chat=%s", self._state.value, chat_id)
                return True
            await self._close_socket()
            self._transition(ConnectionState.DISCONNECTED, reason="rebind")

        self._timers.cancel(_RECONNECT_TIMER)
        self._chat_id = chat_id
        self._reconnect.reset()
        try:
            return await self._open()
        except ChatClientError as err:
            return self._handle_open_failure(err)

    async def _open(self) -> bool:
        url = self.connection_url(self._chat_id)
        generation = self._generation
        self._transition(ConnectionState.CONNECTING)
        try:
            ws = await asyncio.wait_for(self._connect_fn(url), timeout=self._connect_timeout_s)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if generation != self._generation:
                logger.debug("connection: open failed after teardown: %s", exc)
                return False
            raise handshake_error(exc, url) from exc

        if generation != self._generation:
            logger.debug("connection: socket opened after teardown; closing it")
            with contextlib.suppress(Exception):
                await ws.close(code=WS_CLOSE_NORMAL_CODE, reason=WS_CLOSE_CLIENT_REASON)
            return False

        self._ws = ws
        self._transition(ConnectionState.CONNECTED)
        self._reader = asyncio.create_task(self._read_loop(ws))
        return True

    def _handle_open_failure(self, err: ChatClientError) -> bool:
        error_class = classify_error(err)
        logger.warning(
            "connection: open failed chat=%s attempt=%d class=%s: %s",
            self._chat_id,
            self._reconnect.attempt,
            error_class.value,
            err,
        )
        if not is_recoverable(error_class):
            self._stop_reconnecting(str(err), error_class)
            raise err
        self.attempt_reconnect(error_class=error_class, reason=str(err))
        return False

    # ------------------------------------------------------------------
    # Reconnection
    # ------------------------------------------------------------------

    def attempt_reconnect(
        self,
        chat_id: str | None = None,
        *,
        error_class: ErrorClass | None = ErrorClass.NETWORK,
        reason: str | None = None,
        close_code: int | None = None,
    ) -> float | None:
        """Schedule the next reconnect attempt.

        Called from DISCONNECTED or FAILED it starts a fresh attempt budget.

        Returns:
            The delay in seconds, or None when the attempt budget is spent and
            the connection moved to FAILED.
        """
        if chat_id is not None:
            self._chat_id = chat_id
        if self._state in (ConnectionState.DISCONNECTED, ConnectionState.FAILED):
            logger.info("connection: reconnect requested from %s chat=%s", self._state.value, self._chat_id)
            self._timers.cancel(_RECONNECT_TIMER)
            self._reconnect.reset()
        self._reconnect.attempt += 1
        self._reconnect.last_error_class = error_class
        if self._reconnect.attempt > self.policy.max_attempts:
            self._reconnect.attempt = self.policy.max_attempts
            self._stop_reconnecting("max_reconnect_attempts", error_class)
            return None

        delay = compute_reconnect_delay(self._reconnect.attempt, error_class, self.policy, rng=self._rng)
        self._reconnect.delay_s = delay
        self._reconnect_total += 1
        self._transition(ConnectionState.RECONNECTING, reason=reason, close_code=close_code)
        logger.warning(
            "connection: reconnect attempt %d/%d in %.2fs chat=%s class=%s",
            self._reconnect.attempt,
            self.policy.max_attempts,
            delay,
            self._chat_id,
            error_class.value if error_class else None,
        )
        self.bus.emit(
            EventKind.RECONNECTING,
            ReconnectAttempt(
                attempt=self._reconnect.attempt,
                max_attempts=self.policy.max_attempts,
                delay_s=delay,
                error_class=error_class,
                close_code=close_code,
            ),
            chat_id=self._chat_id,
        )
        generation = self._generation
        self._timers.schedule(_RECONNECT_TIMER, delay, lambda: self._run_reconnect(generation))
        return delay

    async def _run_reconnect(self, generation: int) -> None:
        if generation != self._generation or self._state is not ConnectionState.RECONNECTING:
            return
        attempt = self._reconnect.attempt
        try:
            opened = await self._open()
        except ChatClientError as err:
            if generation != self._generation:
                return
            error_class = classify_error(err)
            logger.warning(
                "connection: reconnect attempt %d failed chat=%s class=%s: %s",
                attempt,
                self._chat_id,
                error_class.value,
                err,
            )
            if not is_recoverable(error_class):
                self._stop_reconnecting(str(err), error_class)
                return
            self.attempt_reconnect(error_class=error_class, reason=str(err))
            return
        if opened:
            logger.info("connection: reconnected after %d attempt(s) chat=%s", attempt, self._chat_id)
            self.bus.emit(EventKind.RECONNECTION_SUCCEEDED, attempt, chat_id=self._chat_id)

    def _stop_reconnecting(self, reason: str, error_class: ErrorClass | None) -> None:
        self._timers.cancel(_RECONNECT_TIMER)
        attempts = self._reconnect.attempt
        if self._state is not ConnectionState.DISCONNECTED:
            self._transition(ConnectionState.FAILED, reason=reason)
        logger.error(
            "connection: giving up chat=%s attempts=%d class=%s reason=%s",
            self._chat_id,
            attempts,
            error_class.value if error_class else None,
            reason,
        )
        self.bus.emit(
            EventKind.RECONNECTION_STOPPED,
            ReconnectionStopped(reason=reason, attempts=attempts, error_class=error_class),
            chat_id=self._chat_id,
        )

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    async def _read_loop(self, ws: Any) -> None:
        set_log_context(chat_id=self._chat_id or "-", client_id=self._client_id or "-")
        close_exc: BaseException | None = None
        try:
            async for raw in ws:
                await self._handle_raw(raw)
        except websockets.ConnectionClosed as exc:
            close_exc = exc
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.exception("connection: receive loop crashed chat=%s", self._chat_id)
            close_exc = exc
        if ws is not self._ws:
            return
        code, reason = _close_details(ws, close_exc)
        self._on_closed(code, reason)

    async def _handle_raw(self, raw: str | bytes) -> None:
        try:
            event = normalize_inbound(parse_frame(raw))
        except ProtocolError as exc:
            self._protocol_errors += 1
            logger.warning("connection: dropping malformed frame chat=%s: %s", self._chat_id, exc)
            return
        if self._dedupe.is_duplicate(event):
            logger.debug("connection: duplicate %s dropped message=%s", event.name, event.message_id)
            return
        await self._apply(event)
        self.bus.publish(event)

    async def _apply(self, event: Event) -> None:
        """Connection-level reactions that must happen before subscribers run."""
        kind = event.kind
        if kind is EventKind.CONNECTION_ESTABLISHED:
            client_id = getattr(event.payload, "client_id", None)
            if client_id:
                self._client_id = client_id
        elif kind is EventKind.CONNECTION_READY:
            client_id = getattr(event.payload, "client_id", None)
            if client_id:
                self._client_id = client_id
            if self._state is ConnectionState.CONNECTED:
                self._reconnect.reset()
                self._transition(ConnectionState.READY, reason="server_ready")
        elif kind is EventKind.PING:
            await self._send_pong(getattr(event.payload, "timestamp", None))

    async def _send_pong(self, timestamp: Any) -> None:
        try:
            await self.send(OutboundType.PONG, {"timestamp": timestamp})
        except ChatClientError as exc:
            logger.warning("connection: pong failed chat=%s: %s", self._chat_id, exc)

    def _on_closed(self, code: int, reason: str | None) -> None:
        self._ws = None
        self._reader = None
        disposition = classify_close(code, client_initiated=self._closing)
        logger.info(
            "connection: closed chat=%s code=%s reason=%s -> %s",
            self._chat_id,
            code,
            reason,
            disposition.label,
        )
        if disposition.next_state is ConnectionState.DISCONNECTED:
            self._transition(ConnectionState.DISCONNECTED, reason=disposition.label, close_code=code)
            return
        if disposition.next_state is ConnectionState.FAILED:
            self._transition(ConnectionState.FAILED, reason=disposition.label, close_code=code)
            self.bus.emit(
                EventKind.RECONNECTION_STOPPED,
                ReconnectionStopped(reason=disposition.label, attempts=0, error_class=disposition.error_class),
                chat_id=self._chat_id,
            )
            return
        self.attempt_reconnect(error_class=disposition.error_class, reason=disposition.label, close_code=code)

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    async def send(self, frame_type: OutboundType | str, data: dict[str, Any] | None = None) -> None:
        """Send one frame.

        Raises:
            ConnectionNotReadyError: Not READY (pongs only need an open socket).
            ConnectionClosedError: The socket closed during the write.
            TransportError: Any other write failure.
        """
        is_pong = frame_type in (OutboundType.PONG, OutboundType.PONG.value)
        if not is_pong and self._state is not ConnectionState.READY:
            raise ConnectionNotReadyError(self._state.value)
        ws = self._ws
        if ws is None:
            raise ConnectionNotReadyError(self._state.value)
        frame = normalize_outbound(frame_type, data, client_id=self._client_id)
        try:
            await ws.send(encode_frame(frame))
        except websockets.ConnectionClosed as exc:
            code, reason = _close_details(ws, exc)
            raise ConnectionClosedError(close_code=code, close_reason=reason) from exc
        except OSError as exc:
            raise TransportError(f"send failed: {exc}") from exc

    async def send_chat_message(
        self,
        content: str,
        *,
        chat_id: str | None,
        client_message_id: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        data: dict[str, Any] = {
            "content": content,
            "chat_id": chat_id,
            "client_message_id": client_message_id,
        }
        if metadata:
            data["metadata"] = metadata
        await self.send(OutboundType.CHAT_MESSAGE, data)

    async def join_chat(self, chat_id: str) -> None:
        await self.send(OutboundType.JOIN_CHAT, {"chat_id": chat_id})
        self._chat_id = chat_id

    async def leave_chat(self, chat_id: str) -> None:
        await self.send(OutboundType.LEAVE_CHAT, {"chat_id": chat_id})

    async def send_typing(self, chat_id: str | None, is_typing: bool) -> None:
        frame_type = OutboundType.TYPING_START if is_typing else OutboundType.TYPING_STOP
        await self.send(frame_type, {"chat_id": chat_id})

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    async def _close_socket(self) -> None:
        self._generation += 1
        await self._timers.aclose()
        ws, reader = self._ws, self._reader
        self._ws = None
        self._reader = None
        self._closing = True
        try:
            if ws is not None:
                with contextlib.suppress(Exception):
                    await ws.close(code=WS_CLOSE_NORMAL_CODE, reason=WS_CLOSE_CLIENT_REASON)
            if reader is not asyncio.current_task():
                await cancel_task(reader)
        finally:
            self._closing = False

    async def disconnect(self, reason: str = WS_CLOSE_CLIENT_REASON) -> None:
        """Close the socket and stop any reconnect loop. Idempotent."""
        await self._close_socket()
        self._reconnect.reset()
        self._dedupe.clear()
        if self._state is not ConnectionState.DISCONNECTED:
            self._transition(ConnectionState.DISCONNECTED, reason=reason)

    async def fail(self, reason: str) -> None:
        """Close the socket and enter FAILED (e.g. the server never got ready)."""
        await self._close_socket()
        if self._state not in (ConnectionState.DISCONNECTED, ConnectionState.FAILED):
            self._transition(ConnectionState.FAILED, reason=reason)


__all__ = ["ConnectFn", "ConnectionManager", "handshake_error", "open_websocket"]
