"""Unit tests for the outbound message registry."""

from __future__ import annotations

import re

import pytest

from chatlink.errors import InvalidTransitionError
from chatlink.messages import MessageRegistry
from chatlink.state import Message, MessageRole, MessageStatus, RegistryState

TEMP_ID_RE = re.compile(r"^temp_\d+_[0-9a-f]{8}$")


class _Clock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now


def _draft(content: str) -> Message:
    return Message(id=None, role=MessageRole.USER, content=content, status=MessageStatus.SENDING)


def _sent(registry: MessageRegistry, content: str) -> str:
    entry = registry.register_message(_draft(content))
    registry.update_message_state(entry.temp_id, RegistryState.SENDING)
    registry.update_message_state(entry.temp_id, RegistryState.SENT)
    return entry.temp_id


def test_register_assigns_temp_id_and_correlation() -> None:
    registry = MessageRegistry()
    entry = registry.register_message(_draft("hello"), {"chat_id": "c1"})

    assert TEMP_ID_RE.match(entry.temp_id)
    assert entry.state is RegistryState.CREATED
    assert entry.message.id == entry.temp_id
    assert entry.message.metadata.client_message_id == entry.temp_id
    assert entry.context == {"chat_id": "c1"}
    assert entry.temp_id in registry


def test_register_rejects_a_tracked_id() -> None:
    registry = MessageRegistry()
    entry = registry.register_message(_draft("hello"))
    again = _draft("hello")
    again.id = entry.temp_id

    with pytest.raises(ValueError, match="already registered"):
        registry.register_message(again)


def test_illegal_transitions_raise() -> None:
    registry = MessageRegistry()
    entry = registry.register_message(_draft("hello"))

    with pytest.raises(InvalidTransitionError):
        registry.update_message_state(entry.temp_id, RegistryState.RECONCILED)
    with pytest.raises(InvalidTransitionError):
        registry.update_message_state(entry.temp_id, RegistryState.DELIVERED)
    assert entry.state is RegistryState.CREATED


def test_transitions_record_history_and_merge_metadata() -> None:
    clock = _Clock()
    registry = MessageRegistry(now_fn=clock)
    temp_id = _sent(registry, "hello")
    clock.now += 1.0
    entry = registry.update_message_state(temp_id, RegistryState.DELIVERED, {"stage": "processing"})

    assert entry is not None
    assert [step.state for step in entry.history] == [
        RegistryState.CREATED,
        RegistryState.SENDING,
        RegistryState.SENT,
        RegistryState.DELIVERED,
    ]
    assert entry.history[-1].at == 1001.0
    assert entry.metadata == {"stage": "processing"}


def test_unknown_ids_are_no_ops() -> None:
    registry = MessageRegistry()

    assert registry.get("missing") is None
    assert registry.get(None) is None
    assert registry.update_message_state("missing", RegistryState.SENT) is None
    assert registry.reconcile_message("missing", "srv_1") is None


def test_reconcile_happens_exactly_once() -> None:
    registry = MessageRegistry()
    temp_id = _sent(registry, "hello")

    entry = registry.reconcile_message(temp_id, "srv_1", {"source": "ack"})

    assert entry is not None
    assert entry.state is RegistryState.RECONCILED
    assert entry.server_id == "srv_1"
    assert entry.message.id == "srv_1"
    assert registry.get("srv_1") is entry
    assert registry.get(temp_id) is entry
    assert registry.reconcile_message(temp_id, "srv_2") is None
    assert entry.server_id == "srv_1"


def test_reconcile_from_sending_marks_sent_first() -> None:
    registry = MessageRegistry()
    entry = registry.register_message(_draft("hello"))
    registry.update_message_state(entry.temp_id, RegistryState.SENDING)

    registry.reconcile_message(entry.temp_id, "srv_1")

    states = [step.state for step in entry.history]
    assert states[-2:] == [RegistryState.SENT, RegistryState.RECONCILED]


def test_server_id_owned_by_another_entry_is_refused() -> None:
    registry = MessageRegistry()
    first = _sent(registry, "one")
    second = _sent(registry, "two")
    registry.reconcile_message(first, "srv_1")

    assert registry.reconcile_message(second, "srv_1") is None
    assert registry.get(second).server_id is None


def test_reconcile_by_content_picks_most_recent_similar_entry() -> None:
    registry = MessageRegistry()
    older = _sent(registry, "What is the refund policy?")
    newer = _sent(registry, "what is the  refund policy")
    _sent(registry, "Something unrelated entirely")

    entry = registry.reconcile_by_content("What is the refund policy?", "srv_9")

    assert entry is not None
    assert entry.temp_id == newer
    assert registry.get(older).server_id is None


def test_reconcile_by_content_below_threshold_is_none() -> None:
    registry = MessageRegistry()
    _sent(registry, "Book a table for two")

    assert registry.reconcile_by_content("Cancel my subscription", "srv_1") is None
    assert registry.reconcile_by_content("Cancel my subscription", "srv_1", threshold=0.0) is not None


def test_reconcile_by_content_skips_failed_entries() -> None:
    registry = MessageRegistry()
    temp_id = _sent(registry, "hello there")
    registry.update_message_state(temp_id, RegistryState.FAILED, {"reason": "message_timeout"})

    assert registry.reconcile_by_content("hello there", "srv_1") is None


def test_cleanup_orphans_drops_stale_unreconciled_entries() -> None:
    clock = _Clock()
    registry = MessageRegistry(orphan_timeout_s=60.0, now_fn=clock)
    stale = _sent(registry, "old")
    kept = _sent(registry, "reconciled")
    registry.reconcile_message(kept, "srv_1")
    clock.now += 120.0
    fresh = _sent(registry, "new")

    removed = registry.cleanup_orphans()

    assert removed == 1
    assert stale not in registry
    assert kept in registry
    assert fresh in registry
    assert registry.stats().orphaned == 1


def test_cleanup_orphans_caps_unreconciled_backlog() -> None:
    registry = MessageRegistry(max_orphans=2)
    ids = [_sent(registry, f"message {i}") for i in range(4)]

    assert registry.cleanup_orphans() == 2
    assert [entry.temp_id for entry in registry.entries()] == ids[2:]


def test_stats_summarize_entries() -> None:
    clock = _Clock()
    registry = MessageRegistry(now_fn=clock)
    done = _sent(registry, "one")
    failed = _sent(registry, "two")
    registry.register_message(_draft("three"))
    clock.now += 2.0
    registry.reconcile_message(done, "srv_1")
    registry.update_message_state(failed, RegistryState.FAILED)

    stats = registry.stats()

    assert stats.total == 3
    assert stats.reconciled == 1
    assert stats.failed == 1
    assert stats.pending == 1
    assert stats.average_reconcile_s == 2.0
