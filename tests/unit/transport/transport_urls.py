"""Unit tests for connection URL construction."""

from __future__ import annotations

import pytest

from chatlink.errors import ConfigurationError
from chatlink.transport import build_connection_url, redact_url


def test_identity_travels_as_query_parameters() -> None:
    url = build_connection_url(
        "ws://chat.test:8000",
        tenant_id="acme",
        chat_id="chat_1",
        client_id="client_1",
        token="s3cret",
        path="/ws/chat",
    )

    assert url == "ws://chat.test:8000/ws/chat?tenant_id=acme&chat_id=chat_1&client_id=client_1&token=s3cret"


def test_http_origin_is_upgraded_and_tenant_only_url_omits_chat() -> None:
    url = build_connection_url("https://chat.test", tenant_id="acme", path="/ws/chat")

    assert url == "wss://chat.test/ws/chat?tenant_id=acme"


def test_full_endpoint_path_is_kept_and_stale_identity_replaced() -> None:
    url = build_connection_url("ws://chat.test/custom?tenant_id=old&v=2", tenant_id="acme", path="/ws/chat")

    assert url == "ws://chat.test/custom?v=2&tenant_id=acme"


def test_missing_tenant_is_a_configuration_error() -> None:
    with pytest.raises(ConfigurationError, match="tenant_id"):
        build_connection_url("ws://chat.test", tenant_id="  ")


def test_unusable_scheme_is_a_configuration_error() -> None:
    with pytest.raises(ConfigurationError, match="Invalid WebSocket URL"):
        build_connection_url("ftp://chat.test", tenant_id="acme")


def test_redact_url_hides_token() -> None:
    url = build_connection_url("ws://chat.test", tenant_id="acme", token="s3cret", path="/ws")

    redacted = redact_url(url)

    assert "s3cret" not in redacted
    assert "tenant_id=acme" in redacted
