"""Unit tests for src.utils.concurrency."""

from __future__ import annotations

import asyncio

import pytest

from src.utils.concurrency import run_with_deadline, throttled_gather


# ======================================================================
# throttled_gather
# ======================================================================


class TestThrottledGather:
    @pytest.mark.asyncio
    async def test_bounded_and_ordered(self) -> None:
        running = 0
        peak = 0

        async def job(n: int) -> int:
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1
            return n * 10

        results = await throttled_gather([job(n) for n in range(5)], semaphore=asyncio.Semaphore(2))
        assert results == [0, 10, 20, 30, 40]
        assert peak == 2

    @pytest.mark.asyncio
    async def test_exceptions_returned(self) -> None:
        async def boom() -> int:
            raise ValueError("bad")

        (result,) = await throttled_gather([boom()], semaphore=asyncio.Semaphore(1))
        assert isinstance(result, ValueError)


# ======================================================================
# run_with_deadline
# ======================================================================


class TestRunWithDeadline:
    @pytest.mark.asyncio
    async def test_all_settled(self) -> None:
        async def ok() -> str:
            return "done"

        async def fail() -> str:
            raise RuntimeError("nope")

        settled, timed_out = await run_with_deadline({"a": ok(), "b": fail()}, 1.0)
        assert settled["a"] == "done"
        assert isinstance(settled["b"], RuntimeError)
        assert timed_out == []

    @pytest.mark.asyncio
    async def test_deadline_cancels_pending(self) -> None:
        cancelled: list[str] = []

        async def slow() -> str:
            try:
                await asyncio.sleep(5)
            except asyncio.CancelledError:
                cancelled.append("slow")
                raise
            return "late"

        async def fast() -> str:
            return "early"

        settled, timed_out = await run_with_deadline({"fast": fast(), "slow": slow()}, 0.05)
        assert settled == {"fast": "early"}
        assert timed_out == ["slow"]
        assert cancelled == ["slow"]

    @pytest.mark.asyncio
    async def test_caller_cancellation_cancels_tasks(self) -> None:
        started = asyncio.Event()
        cancelled: list[str] = []

        async def slow(name: str) -> str:
            started.set()
            try:
                await asyncio.sleep(5)
            except asyncio.CancelledError:
                cancelled.append(name)
                raise
            return name

        before = asyncio.all_tasks()
        outer = asyncio.create_task(run_with_deadline({"a": slow("a"), "b": slow("b")}, 10.0))
        await started.wait()
        outer.cancel()
        with pytest.raises(asyncio.CancelledError):
            await outer

        assert sorted(cancelled) == ["a", "b"]
        leftover = {t for t in asyncio.all_tasks() - before if not t.done()}
        assert leftover == set()

    @pytest.mark.asyncio
    async def test_empty(self) -> None:
        assert await run_with_deadline({}, 1.0) == ({}, [])
