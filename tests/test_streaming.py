"""Tests for the summary stream relay and its SSE encoding."""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator

import pytest

from meeting_maestro.errors import UpstreamFailureError
from meeting_maestro.streaming.events import EventKind, StreamEvent
from meeting_maestro.streaming.relay import open_relay


class FakeUpstream:
    """Async delta source that records how far it was consumed."""

    def __init__(
        self,
        deltas: list[str | None],
        fail_after: int | None = None,
        delay: float = 0.0,
    ) -> None:
        self.deltas = deltas
        self.fail_after = fail_after
        self.delay = delay
        self.pulled = 0
        self.closed = False

    async def stream(self) -> AsyncIterator[str | None]:
        try:
            for index, delta in enumerate(self.deltas):
                if self.fail_after is not None and index == self.fail_after:
                    raise ConnectionError("upstream reset")
                if self.delay:
                    await asyncio.sleep(self.delay)
                self.pulled += 1
                yield delta
            if self.fail_after is not None and self.fail_after >= len(self.deltas):
                raise ConnectionError("upstream reset")
        finally:
            self.closed = True


async def _collect(events: AsyncIterator[StreamEvent]) -> list[StreamEvent]:
    return [event async for event in events]


async def _relay_all(deltas: AsyncIterator[str | None]) -> list[StreamEvent]:
    return await _collect(await open_relay(deltas))


class TestStreamEvent:
    def test_content_frame(self) -> None:
        assert StreamEvent.content("Hel").to_sse() == 'data: {"content": "Hel"}\n\n'

    def test_done_frame(self) -> None:
        assert StreamEvent.done().to_sse() == 'data: {"type": "done"}\n\n'
        assert StreamEvent.done().payload is None

    def test_content_is_json_escaped(self) -> None:
        frame = StreamEvent.content('line "one"\nnext').to_sse()
        assert frame.startswith("data: ") and frame.endswith("\n\n")
        assert json.loads(frame[len("data: ") : -2]) == {"content": 'line "one"\nnext'}


class TestRelayOrdering:
    @pytest.mark.asyncio
    async def test_forwards_deltas_in_order_then_done(self) -> None:
        upstream = FakeUpstream(["Hel", "lo", " world"])
        events = await _relay_all(upstream.stream())

        assert [e.kind for e in events] == [
            EventKind.CONTENT,
            EventKind.CONTENT,
            EventKind.CONTENT,
            EventKind.DONE,
        ]
        assert [e.payload for e in events[:3]] == ["Hel", "lo", " world"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "deltas",
        [
            ["", "Hel", "lo", " world"],
            ["Hel", "", "lo", " world"],
            ["Hel", "lo", None, " world", ""],
        ],
    )
    async def test_empty_deltas_are_suppressed(self, deltas: list[str | None]) -> None:
        events = await _relay_all(FakeUpstream(deltas).stream())
        assert [e.payload for e in events] == ["Hel", "lo", " world", None]
        assert events[-1].kind is EventKind.DONE

    @pytest.mark.asyncio
    async def test_empty_upstream_still_emits_done(self) -> None:
        upstream = FakeUpstream([])
        events = await _relay_all(upstream.stream())
        assert events == [StreamEvent.done()]
        assert upstream.closed


class TestRelayFailures:
    @pytest.mark.asyncio
    async def test_error_before_content_raises(self) -> None:
        upstream = FakeUpstream(["never"], fail_after=0)
        with pytest.raises(UpstreamFailureError):
            await open_relay(upstream.stream())
        assert upstream.closed

    @pytest.mark.asyncio
    async def test_error_after_only_empty_deltas_raises(self) -> None:
        upstream = FakeUpstream(["", ""], fail_after=2)
        with pytest.raises(UpstreamFailureError):
            await open_relay(upstream.stream())

    @pytest.mark.asyncio
    async def test_upstream_failure_error_passes_through(self) -> None:
        async def failing() -> AsyncIterator[str]:
            raise UpstreamFailureError("OpenAI stream failed: 401")
            yield ""  # pragma: no cover

        with pytest.raises(UpstreamFailureError, match="401"):
            await open_relay(failing())

    @pytest.mark.asyncio
    async def test_error_after_content_ends_with_done(self) -> None:
        upstream = FakeUpstream(["Hel", "lo", " world"], fail_after=2)
        events = await _collect(await open_relay(upstream.stream()))

        assert [e.payload for e in events] == ["Hel", "lo", None]
        assert events[-1].kind is EventKind.DONE
        assert upstream.closed

    @pytest.mark.asyncio
    async def test_timeout_before_content_raises(self) -> None:
        upstream = FakeUpstream(["late"], delay=1.0)
        with pytest.raises(UpstreamFailureError, match="timed out"):
            await open_relay(upstream.stream(), timeout=0.05)
        assert upstream.closed

    @pytest.mark.asyncio
    async def test_timeout_after_content_ends_with_done(self) -> None:
        async def slow_tail() -> AsyncIterator[str]:
            yield "fast"
            await asyncio.sleep(1.0)
            yield "slow"

        events = await _collect(await open_relay(slow_tail(), timeout=0.1))
        assert [e.payload for e in events] == ["fast", None]


class TestRelayCancellation:
    @pytest.mark.asyncio
    async def test_consumer_stop_stops_upstream(self) -> None:
        upstream = FakeUpstream(["a", "b", "c", "d", "e"])
        events = await open_relay(upstream.stream())

        received = [await anext(events), await anext(events)]
        await events.aclose()

        assert [e.payload for e in received] == ["a", "b"]
        assert upstream.pulled == 2
        assert upstream.closed

    @pytest.mark.asyncio
    async def test_primed_relay_pulls_only_first_delta(self) -> None:
        upstream = FakeUpstream(["a", "b", "c"])
        events = await open_relay(upstream.stream())

        assert upstream.pulled == 1
        await events.aclose()
        assert upstream.closed

    @pytest.mark.asyncio
    async def test_close_after_exhaustion_is_safe(self) -> None:
        upstream = FakeUpstream(["a"])
        events = await open_relay(upstream.stream())

        assert [e.kind for e in await _collect(events)] == [EventKind.CONTENT, EventKind.DONE]
        await events.aclose()
        await events.aclose()
        assert upstream.closed

    @pytest.mark.asyncio
    async def test_task_cancellation_closes_upstream(self) -> None:
        upstream = FakeUpstream(["a", "b", "c"], delay=0.2)
        consumed: list[StreamEvent] = []

        async def consume() -> None:
            async for event in await open_relay(upstream.stream()):
                consumed.append(event)

        task = asyncio.create_task(consume())
        await asyncio.sleep(0.3)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert upstream.closed
        assert upstream.pulled < 3
