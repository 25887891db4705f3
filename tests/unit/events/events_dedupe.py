"""Unit tests for the recent-event fingerprint window."""

from __future__ import annotations

from chatlink.events import Event, EventDeduplicator, EventKind, ResponseComplete, normalize_inbound


def _complete(message_id: str = "m1", ts: str | None = "t1", content: str = "done") -> Event:
    return Event(
        kind=EventKind.RESPONSE_COMPLETE,
        payload=ResponseComplete(message_id=message_id, content=content),
        chat_id="chat_1",
        event_ts=ts,
    )


def test_repeat_inside_window_is_duplicate() -> None:
    clock = [100.0]
    dedupe = EventDeduplicator(window_s=1.0, now_fn=lambda: clock[0])

    assert not dedupe.is_duplicate(_complete())
    clock[0] += 0.5
    assert dedupe.is_duplicate(_complete())
    assert dedupe.stats().dropped == 1


def test_repeat_after_window_is_admitted() -> None:
    clock = [100.0]
    dedupe = EventDeduplicator(window_s=1.0, now_fn=lambda: clock[0])

    assert not dedupe.is_duplicate(_complete())
    clock[0] += 1.5
    assert not dedupe.is_duplicate(_complete())


def test_fingerprint_distinguishes_timestamp_and_content() -> None:
    dedupe = EventDeduplicator(window_s=1.0)

    assert not dedupe.is_duplicate(_complete(ts="t1"))
    assert not dedupe.is_duplicate(_complete(ts="t2"))
    assert not dedupe.is_duplicate(_complete(ts="t2", content="other"))


def test_content_beyond_prefix_is_ignored() -> None:
    dedupe = EventDeduplicator(window_s=1.0, content_prefix=5)

    assert not dedupe.is_duplicate(_complete(content="hello world"))
    assert dedupe.is_duplicate(_complete(content="hello there"))


def test_window_is_bounded_in_size() -> None:
    dedupe = EventDeduplicator(window_s=10.0, max_entries=2)

    dedupe.is_duplicate(_complete("a"))
    dedupe.is_duplicate(_complete("b"))
    dedupe.is_duplicate(_complete("c"))

    assert dedupe.stats().tracked == 2
    assert not dedupe.is_duplicate(_complete("a"))


def test_zero_window_disables_dedup() -> None:
    dedupe = EventDeduplicator(window_s=0)

    assert not dedupe.is_duplicate(_complete())
    assert not dedupe.is_duplicate(_complete())


def test_clear_forgets_fingerprints() -> None:
    dedupe = EventDeduplicator(window_s=1.0)
    dedupe.is_duplicate(_complete())
    dedupe.clear()

    assert not dedupe.is_duplicate(_complete())


def test_aliases_sharing_a_kind_do_not_collide() -> None:
    dedupe = EventDeduplicator(window_s=1.0)
    start = normalize_inbound({"type": "typing_start", "data": {"user_id": "u1"}})
    stop = normalize_inbound({"type": "typing_stop", "data": {"user_id": "u1"}})

    assert start.kind is stop.kind
    assert not dedupe.is_duplicate(start)
    assert not dedupe.is_duplicate(stop)
    assert dedupe.is_duplicate(normalize_inbound({"type": "typing_stop", "data": {"user_id": "u1"}}))


def test_chunks_without_timestamp_are_never_duplicates() -> None:
    dedupe = EventDeduplicator(window_s=1.0)
    frames = [
        {"type": "response_chunk", "data": {"message_id": "m1", "content": fragment}}
        for fragment in ("ha", "ha", "!")
    ]

    assert [dedupe.is_duplicate(normalize_inbound(frame)) for frame in frames] == [False, False, False]
    assert dedupe.stats().dropped == 0


def test_timestamped_chunk_replay_is_still_dropped() -> None:
    dedupe = EventDeduplicator(window_s=1.0)
    frame = {"type": "response_chunk", "timestamp": "t1", "data": {"message_id": "m1", "content": "ha"}}

    assert not dedupe.is_duplicate(normalize_inbound(frame))
    assert dedupe.is_duplicate(normalize_inbound(frame))


def test_handshake_frames_are_admitted_for_every_socket() -> None:
    dedupe = EventDeduplicator(window_s=1.0)
    ready = {"type": "connection_ready", "data": {"client_id": "client_1"}}

    assert not dedupe.is_duplicate(normalize_inbound(ready))
    assert not dedupe.is_duplicate(normalize_inbound(ready))
