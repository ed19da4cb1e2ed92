"""Unit tests for src.pipeline.stream_emitter."""

from __future__ import annotations

from typing import Any

import pytest

from src.models.discovery import StreamEvent, StreamEventType
from src.pipeline.stream_emitter import StreamEmitter
from src.utils.errors import MalformedResponse


async def _collect(stream: Any) -> list[StreamEvent]:
    return [event async for event in stream]


class _RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class TestReplay:
    @pytest.mark.asyncio
    async def test_shape_and_pacing(self) -> None:
        sleep = _RecordingSleep()
        emitter = StreamEmitter(pacing_seconds=0.05, sleep=sleep)
        events = await _collect(emitter.replay([{"n": 1}, {"n": 2}, {"n": 3}]))

        assert [e.type for e in events] == [
            StreamEventType.START,
            StreamEventType.ITEM,
            StreamEventType.ITEM,
            StreamEventType.ITEM,
            StreamEventType.COMPLETE,
        ]
        assert events[0].total == 3 and events[-1].total == 3
        assert [e.index for e in events[1:4]] == [0, 1, 2]
        assert all(e.cached for e in events)
        # No delay before the first item.
        assert sleep.calls == [0.05, 0.05]

    @pytest.mark.asyncio
    async def test_unpaced(self) -> None:
        sleep = _RecordingSleep()
        emitter = StreamEmitter(pacing_seconds=0.05, sleep=sleep)
        events = await _collect(emitter.replay([{"n": 1}, {"n": 2}], cached=False, paced=False))
        assert sleep.calls == []
        assert not any(e.cached for e in events)

    @pytest.mark.asyncio
    async def test_empty(self) -> None:
        events = await _collect(StreamEmitter().replay([]))
        assert [(e.type, e.total) for e in events] == [
            (StreamEventType.START, 0),
            (StreamEventType.COMPLETE, 0),
        ]


class TestGenerate:
    @pytest.mark.asyncio
    async def test_failed_item_reported_in_place(self) -> None:
        async def producer(index: int) -> dict[str, Any]:
            if index == 2:
                raise MalformedResponse(message="no campaign object", provider_name="mock-llm")
            return {"index": index}

        events = await _collect(StreamEmitter(pacing_seconds=0).generate(5, producer))

        assert events[0].type is StreamEventType.START and events[0].total == 5
        body = [(e.type, e.index) for e in events[1:-1]]
        assert body == [
            (StreamEventType.ITEM, 0),
            (StreamEventType.ITEM, 1),
            (StreamEventType.ITEM_ERROR, 2),
            (StreamEventType.ITEM, 3),
            (StreamEventType.ITEM, 4),
        ]
        assert events[3].message == "[mock-llm] no campaign object"
        assert events[-1].type is StreamEventType.COMPLETE
        assert events[-1].total == 4

    @pytest.mark.asyncio
    async def test_unexpected_error_propagates(self) -> None:
        async def producer(index: int) -> dict[str, Any]:
            raise RuntimeError("bug")

        with pytest.raises(RuntimeError):
            await _collect(StreamEmitter().generate(2, producer))
