"""Incremental result streaming.

Every stream has the same shape::

    start(total) -> item | item-error (index ascending) -> complete(total)

``complete.total`` counts the items actually emitted, so a stream with a
failed item ends with a smaller total than it started with.  Cached
replays are paced so clients render them progressively; freshly generated
items are emitted as soon as they exist.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from typing import Any

from src.models.discovery import StreamEvent, StreamEventType
from src.utils.errors import GravityError
from src.utils.logging import get_logger

ItemProducer = Callable[[int], Awaitable[dict[str, Any]]]


class StreamEmitter:
    """Builds :class:`StreamEvent` sequences for replays and live generation."""

    def __init__(
        self,
        pacing_seconds: float = 0.05,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._pacing = pacing_seconds
        self._sleep = sleep
        self._logger = get_logger(__name__)

    async def replay(
        self,
        artifacts: Sequence[dict[str, Any]],
        cached: bool = True,
        paced: bool = True,
    ) -> AsyncIterator[StreamEvent]:
        """Stream already-available artifacts."""
        total = len(artifacts)
        yield StreamEvent(type=StreamEventType.START, total=total, cached=cached)
        for index, artifact in enumerate(artifacts):
            if paced and index > 0 and self._pacing > 0:
                await self._sleep(self._pacing)
            yield StreamEvent(type=StreamEventType.ITEM, index=index, item=artifact, cached=cached)
        yield StreamEvent(type=StreamEventType.COMPLETE, total=total, cached=cached)

    async def generate(self, total: int, producer: ItemProducer) -> AsyncIterator[StreamEvent]:
        """Produce ``total`` items one at a time through ``producer(index)``.

        A producer that raises a :class:`GravityError` yields an
        ``item-error`` for that index and generation moves on.  Any other
        exception propagates.
        """
        emitted = 0
        yield StreamEvent(type=StreamEventType.START, total=total)
        for index in range(total):
            try:
                item = await producer(index)
            except GravityError as exc:
                self._logger.warning("stream_item_failed", index=index, error=str(exc))
                yield StreamEvent(type=StreamEventType.ITEM_ERROR, index=index, message=str(exc))
                continue
            emitted += 1
            yield StreamEvent(type=StreamEventType.ITEM, index=index, item=item)
        yield StreamEvent(type=StreamEventType.COMPLETE, total=emitted)
