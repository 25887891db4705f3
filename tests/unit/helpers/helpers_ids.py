"""Unit tests for id generation and content similarity."""

from __future__ import annotations

import re

from chatlink.helpers.ids import (
    is_valid_session_id,
    new_message_id,
    new_session_id,
    new_temp_id,
    new_visitor_id,
)
from chatlink.helpers.similarity import content_similarity, normalize_content


def test_generated_ids_have_prefix_time_and_suffix() -> None:
    for factory, prefix in (
        (new_temp_id, "temp"),
        (new_message_id, "msg"),
        (new_session_id, "session"),
        (new_visitor_id, "visitor"),
    ):
        value = factory()
        assert re.match(rf"^{prefix}_\d{{13,}}_[0-9a-f]{{8}}$", value), value


def test_generated_ids_are_unique() -> None:
    assert len({new_temp_id() for _ in range(200)}) == 200


def test_session_id_validation() -> None:
    assert is_valid_session_id(new_session_id())
    assert is_valid_session_id("abc-DEF_123")
    assert not is_valid_session_id("short")
    assert not is_valid_session_id("has space in it")
    assert not is_valid_session_id("x" * 101)
    assert not is_valid_session_id(None)


def test_similarity_ignores_case_and_whitespace() -> None:
    assert normalize_content("  Hello\n  World ") == "hello world"
    assert content_similarity("Hello   world", "hello world") == 1.0
    assert content_similarity("", "") == 1.0
    assert content_similarity("hello", "") == 0.0


def test_similarity_separates_different_messages() -> None:
    assert content_similarity("Where is my order?", "where is my order") >= 0.9
    assert content_similarity("Where is my order?", "Cancel my subscription") < 0.7
