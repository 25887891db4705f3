"""Connection URL construction.

Identity is carried entirely in query parameters; the server authenticates
the upgrade request and never expects a handshake message. Accepts either a
bare origin (``ws://host:port``), an http(s) origin, or a full endpoint URL.
"""

from __future__ import annotations

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from chatlink.config.websocket import CHAT_WS_PATH
from chatlink.errors import ConfigurationError

_HTTP_TO_WS = {"http": "ws", "https": "wss"}
_IDENTITY_PARAMS = ("tenant_id", "chat_id", "client_id", "token")


def _split(url: str, default_path: str) -> tuple[str, str, str, str, str]:
    text = (url or "").strip()
    if text and "://" not in text:
        text = f"ws://{text}"
    parts = urlsplit(text)
    scheme = _HTTP_TO_WS.get(parts.scheme, parts.scheme or "ws")
    path = parts.path
    if not path or path.strip("/") == "":
        path = default_path if default_path.startswith("/") else f"/{default_path}"
    return scheme, parts.netloc, path, parts.query, parts.fragment


def build_connection_url(
    base_url: str,
    *,
    tenant_id: str,
    chat_id: str | None = None,
    client_id: str | None = None,
    token: str | None = None,
    path: str = CHAT_WS_PATH,
) -> str:
    """Return the WebSocket URL carrying the connection identity.

    Raises:
        ConfigurationError: Missing tenant id or unusable base URL.
    """
    if not tenant_id or not str(tenant_id).strip():
        raise ConfigurationError("tenant_id is required to open a chat connection")

    scheme, netloc, resolved_path, query, fragment = _split(base_url, path)
    if scheme not in ("ws", "wss") or not netloc:
        raise ConfigurationError(
            f"Invalid WebSocket URL '{base_url}'. Expected format ws(s)://host[:port][{path}]"
        )

    query_items = [(k, v) for k, v in parse_qsl(query, keep_blank_values=True) if k not in _IDENTITY_PARAMS]
    query_items.append(("tenant_id", str(tenant_id).strip()))
    if chat_id:
        query_items.append(("chat_id", chat_id))
    if client_id:
        query_items.append(("client_id", client_id))
    if token:
        query_items.append(("token", token))

    return urlunsplit((scheme, netloc, resolved_path, urlencode(query_items), fragment))


def redact_url(url: str) -> str:
    """Hide the token value so URLs can be logged."""
    parts = urlsplit(url)
    items = [(k, "***" if k == "token" else v) for k, v in parse_qsl(parts.query, keep_blank_values=True)]
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(items), parts.fragment))


__all__ = ["build_connection_url", "redact_url"]
