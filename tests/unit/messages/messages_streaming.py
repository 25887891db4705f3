"""Unit tests for streamed response reassembly."""

from __future__ import annotations

import asyncio

from chatlink.events import ResponseComplete
from chatlink.helpers.timers import Timers
from chatlink.messages import STREAM_TIMEOUT_REASON, StreamAssembler
from chatlink.state import Message, MessageStatus


def test_chunks_concatenate_in_arrival_order() -> None:
    async def _run() -> None:
        timers = Timers("test")
        assembler = StreamAssembler(expiry_s=5.0, flush_interval_s=5.0, timers=timers)

        assembler.start("m1")
        for fragment in ("Hel", "lo, ", "world"):
            assembler.append("m1", fragment)
        message = assembler.complete(ResponseComplete(message_id="m1", model="gpt-x", total_tokens=12))

        assert message.content == "Hello, world"
        assert message.status is MessageStatus.RECEIVED
        assert message.metadata.model == "gpt-x"
        assert message.metadata.total_tokens == 12
        assert not assembler.has_buffer("m1")
        assert timers.keys() == []

    asyncio.run(_run())


def test_completion_content_overrides_buffer() -> None:
    async def _run() -> None:
        assembler = StreamAssembler(expiry_s=5.0, flush_interval_s=5.0)
        assembler.start("m1")
        assembler.append("m1", "partial")

        message = assembler.complete(ResponseComplete(message_id="m1", content="final answer"))

        assert message.content == "final answer"

    asyncio.run(_run())


def test_completion_without_buffer_builds_message() -> None:
    async def _run() -> None:
        assembler = StreamAssembler()

        direct = assembler.complete(ResponseComplete(message_id="m7", content="one shot", sources=["doc"]))
        anonymous = assembler.complete(ResponseComplete(content="no id"))

        assert direct.id == "m7"
        assert direct.content == "one shot"
        assert direct.status is MessageStatus.RECEIVED
        assert direct.metadata.sources == ["doc"]
        assert anonymous.id.startswith("msg_")

    asyncio.run(_run())


def test_chunk_before_start_opens_buffer() -> None:
    async def _run() -> None:
        assembler = StreamAssembler(expiry_s=5.0, flush_interval_s=5.0)

        message = assembler.append("m1", "early")

        assert assembler.has_buffer("m1")
        assert message.status is MessageStatus.STREAMING
        assert message.content == "early"
        assembler.discard_all()

    asyncio.run(_run())


def test_repeated_start_reuses_buffer_and_keeps_metadata() -> None:
    async def _run() -> None:
        assembler = StreamAssembler(expiry_s=5.0, flush_interval_s=5.0)
        first = assembler.start("m1", {"agent": "support"})
        assembler.append("m1", "abc")
        second = assembler.start("m1")

        assert first is second
        message = assembler.complete(ResponseComplete(message_id="m1"))
        assert message.content == "abc"
        assert message.metadata.extra == {"agent": "support"}

    asyncio.run(_run())


def test_silent_stream_expires_as_failed() -> None:
    async def _run() -> None:
        expired: list[Message] = []
        timers = Timers("test")
        assembler = StreamAssembler(on_expired=expired.append, expiry_s=0.02, flush_interval_s=1.0, timers=timers)
        assembler.start("m1")
        assembler.append("m1", "half")

        await asyncio.sleep(0.06)

        assert len(expired) == 1
        assert expired[0].status is MessageStatus.FAILED
        assert expired[0].metadata.error == STREAM_TIMEOUT_REASON
        assert expired[0].content == "half"
        assert not assembler.has_buffer("m1")
        assert timers.keys() == []

    asyncio.run(_run())


def test_each_chunk_rearms_expiry() -> None:
    async def _run() -> None:
        expired: list[Message] = []
        assembler = StreamAssembler(on_expired=expired.append, expiry_s=0.05, flush_interval_s=1.0)
        assembler.start("m1")

        for _ in range(4):
            await asyncio.sleep(0.02)
            assembler.append("m1", "x")

        assert expired == []
        assert assembler.has_buffer("m1")
        assembler.discard_all()

    asyncio.run(_run())


def test_updates_are_batched_per_flush_interval() -> None:
    async def _run() -> None:
        updates: list[str] = []
        assembler = StreamAssembler(
            on_update=lambda message: updates.append(message.content),
            expiry_s=5.0,
            flush_interval_s=0.02,
        )
        assembler.start("m1")
        for fragment in ("a", "b", "c", "d"):
            assembler.append("m1", fragment)

        await asyncio.sleep(0.06)

        assert updates == ["abcd"]
        assembler.discard_all()

    asyncio.run(_run())


def test_fail_and_discard_release_everything() -> None:
    async def _run() -> None:
        timers = Timers("test")
        assembler = StreamAssembler(expiry_s=5.0, flush_interval_s=5.0, timers=timers)
        assembler.start("m1")
        assembler.append("m2", "x")

        failed = assembler.fail("m1", "ai_processing_error")
        discarded = assembler.discard_all()

        assert failed is not None and failed.metadata.error == "ai_processing_error"
        assert assembler.fail("m1", "again") is None
        assert [message.id for message in discarded] == ["m2"]
        assert assembler.active_ids() == []
        assert timers.keys() == []

    asyncio.run(_run())
