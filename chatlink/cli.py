"""Interactive terminal chat client.

- Initializes a session against the configured platform and WebSocket
  endpoint (flags override the ``CHAT_*`` environment variables)
- Prints assistant responses once they complete, plus connection and
  session errors as they happen
- ``/retry`` resends the last failed message, ``/switch <chat_id>`` moves
  to another chat, ``/stats`` prints registry and typing counters,
  ``/quit`` disconnects
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
from argparse import ArgumentParser, Namespace
from collections.abc import Sequence
from dataclasses import dataclass

from chatlink import __version__
from chatlink.config.platform import CHAT_API_BASE_URL
from chatlink.config.secrets import CHAT_AUTH_TOKEN, CHAT_API_KEY
from chatlink.config.session import SESSION_ALLOW_DEGRADED
from chatlink.config.websocket import CHAT_TENANT_ID, CHAT_WS_BASE_URL
from chatlink.errors import ChatClientError
from chatlink.events import Event, EventKind
from chatlink.logging import configure_logging
from chatlink.services import PlatformClient
from chatlink.session import SessionCoordinator
from chatlink.state import InitializeOptions, Message, MessageRole, MessageStatus
from chatlink.transport import ConnectionManager

logger = logging.getLogger("chatlink.cli")


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(prog="chatlink", description="Interactive real-time chat client")
    parser.add_argument(
        "--ws-url",
        default=CHAT_WS_BASE_URL,
        help=f"WebSocket base URL (default env CHAT_WS_BASE_URL or {CHAT_WS_BASE_URL})",
    )
    parser.add_argument(
        "--api-url",
        default=CHAT_API_BASE_URL,
        help=f"Platform REST base URL (default env CHAT_API_BASE_URL or {CHAT_API_BASE_URL})",
    )
    parser.add_argument("--tenant", default=CHAT_TENANT_ID, help="Tenant id (default env CHAT_TENANT_ID)")
    parser.add_argument("--token", default=CHAT_AUTH_TOKEN, help="Auth token (default env CHAT_AUTH_TOKEN)")
    parser.add_argument("--chat-id", dest="chat_id", help="Join an existing chat instead of creating one")
    parser.add_argument(
        "--no-degraded",
        dest="allow_degraded",
        action="store_false",
        default=SESSION_ALLOW_DEGRADED,
        help="Fail instead of connecting tenant-only when no chat id can be created",
    )
    parser.add_argument("--log-level", dest="log_level", help="Log level (default env CHATLINK_LOG_LEVEL)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def parse_command(line: str) -> tuple[str, str] | None:
    """Split ``/cmd arg`` into ``("cmd", "arg")``; None for plain text."""
    if not line.startswith("/"):
        return None
    parts = line[1:].split(maxsplit=1)
    if not parts:
        return "help", ""
    command, *rest = parts
    return command.lower(), (rest[0].strip() if rest else "")


def last_failed(messages: Sequence[Message]) -> Message | None:
    for message in reversed(messages):
        if message.role is MessageRole.USER and message.status is MessageStatus.FAILED:
            return message
    return None


def build_coordinator(args: Namespace) -> SessionCoordinator:
    connection = ConnectionManager(tenant_id=args.tenant, base_url=args.ws_url, token=args.token)
    platform = PlatformClient(base_url=args.api_url, tenant_id=args.tenant, api_key=CHAT_API_KEY)
    return SessionCoordinator(
        tenant_id=args.tenant,
        platform=platform,
        connection=connection,
        allow_degraded=args.allow_degraded,
    )


@dataclass
class InteractiveRunner:
    coordinator: SessionCoordinator
    stdin_task: asyncio.Task | None = None
    _closing: bool = False

    def attach(self) -> None:
        bus = self.coordinator.bus
        bus.subscribe(EventKind.MESSAGE_UPDATED, self._on_message_updated)
        bus.subscribe(EventKind.SESSION_ERROR, self._on_session_error)
        bus.subscribe(EventKind.RECONNECTING, self._on_reconnecting)
        bus.subscribe(EventKind.RECONNECTION_STOPPED, self._on_reconnection_stopped)

    async def run(self) -> None:
        loop = asyncio.get_running_loop()
        sigint_installed = False
        try:
            loop.add_signal_handler(signal.SIGINT, self._handle_sigint)
            sigint_installed = True
        except (NotImplementedError, RuntimeError):
            logger.warning("Signal handlers unavailable; Ctrl+C may be noisy")
        try:
            await self._loop()
        finally:
            if sigint_installed:
                loop.remove_signal_handler(signal.SIGINT)

    async def _loop(self) -> None:
        _print_help()
        while not self._closing:
            try:
                line = await self._read_line()
            except EOFError:
                break
            if not line:
                continue
            command = parse_command(line)
            if command is not None:
                if await self.handle_command(*command):
                    break
                continue
            try:
                self.coordinator.stop_typing()
                await self.coordinator.send_message(line)
            except ChatClientError as exc:
                print(f"! {exc.format_for_user()}")

    async def handle_command(self, command: str, arg: str) -> bool:
        """Run one slash command. Returns True when the loop should exit."""
        coordinator = self.coordinator
        if command in {"help", "?"}:
            _print_help()
            return False
        if command == "retry":
            failed = last_failed(coordinator.messages)
            if failed is None:
                print("! nothing to retry")
                return False
            try:
                await coordinator.retry_message(failed.id)
            except ChatClientError as exc:
                print(f"! {exc.format_for_user()}")
            return False
        if command == "switch":
            if not arg:
                print("! usage: /switch <chat_id>")
                return False
            try:
                session = await coordinator.switch_chat(arg)
            except ChatClientError as exc:
                print(f"! {exc.format_for_user()}")
                return False
            print(f"* now in chat {session.chat_id}")
            return False
        if command == "stats":
            registry = coordinator.registry.stats()
            typing = coordinator.typing_stats()
            dedupe = coordinator.connection.dedupe_stats()
            print(
                f"* state={coordinator.connection_state.value} messages={registry.total} "
                f"reconciled={registry.reconciled} failed={registry.failed} pending={registry.pending} "
                f"typing_reduction={typing.reduction_percentage}% duplicates_dropped={dedupe.dropped}"
            )
            return False
        if command in {"quit", "exit", "stop"}:
            return True
        print(f"! unknown command /{command}; type /help")
        return False

    async def _read_line(self) -> str:
        loop = asyncio.get_running_loop()
        self.stdin_task = loop.create_task(_ainput("you > "))
        try:
            line = await self.stdin_task
        except asyncio.CancelledError as exc:
            raise EOFError("input cancelled") from exc
        finally:
            self.stdin_task = None
        return line.strip()

    def _handle_sigint(self) -> None:
        if self._closing:
            return
        self._closing = True
        logger.info("Ctrl+C received; closing session...")
        if self.stdin_task:
            self.stdin_task.cancel()

    def _on_message_updated(self, event: Event) -> None:
        message: Message = event.payload
        if message.role is MessageRole.ASSISTANT and message.status is MessageStatus.RECEIVED:
            print(f"\nassistant > {message.content}")
        elif message.is_failed:
            print(f"\n! message failed ({message.metadata.error}); /retry to resend")

    def _on_session_error(self, event: Event) -> None:
        error = event.payload
        if isinstance(error, ChatClientError):
            print(f"\n! {error.format_for_user()}")

    def _on_reconnecting(self, event: Event) -> None:
        attempt = event.payload
        print(f"\n* reconnecting (attempt {attempt.attempt}/{attempt.max_attempts}) in {attempt.delay_s:.1f}s")

    def _on_reconnection_stopped(self, event: Event) -> None:
        print(f"\n! connection lost: {event.payload.reason}")


async def _ainput(prompt: str) -> str:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, lambda: input(prompt))


def _print_help() -> None:
    print(
        "\nCommands:\n"
        "  /help                Show this message\n"
        "  /retry               Resend the last failed message\n"
        "  /switch <chat_id>    Move to another chat\n"
        "  /stats               Show session counters\n"
        "  /quit                Disconnect and exit\n"
    )


async def _run(args: Namespace) -> int:
    coordinator = build_coordinator(args)
    runner = InteractiveRunner(coordinator)
    runner.attach()
    try:
        session = await coordinator.initialize(InitializeOptions(chat_id=args.chat_id))
    except ChatClientError as exc:
        logger.error("could not start chat: %s", exc)
        await coordinator.aclose()
        return 1
    print(f"* connected to chat {session.chat_id or '(degraded)'}")
    try:
        await runner.run()
    finally:
        with contextlib.suppress(ChatClientError):
            await coordinator.aclose()
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    return asyncio.run(_run(args))


__all__ = ["InteractiveRunner", "build_coordinator", "build_parser", "last_failed", "main", "parse_command"]
