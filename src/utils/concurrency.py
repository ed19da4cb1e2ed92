"""Shared concurrency primitives for the discovery engine.

Two patterns are exposed:

1. **throttled_gather** -- ``asyncio.gather`` with every awaitable wrapped in
   a semaphore acquire/release.  Batch campaign generation uses it to keep
   LLM calls under the provider's rate limits.

2. **run_with_deadline** -- start a set of coroutines as tasks, wait for all
   of them up to an overall deadline, and cancel whatever is still pending.
   The fallback orchestrator runs its dimensions through it, and the
   relevance scorer its scoring calls.  The caller being cancelled
   cancels the tasks too.

Semaphores are always passed in by the caller; nothing here keeps
module-level state.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Coroutine, TypeVar

import structlog

from src.utils.logging import get_logger

_T = TypeVar("_T")

_logger: structlog.BoundLogger = get_logger(__name__)


async def throttled_gather(
    coros: list[Awaitable[_T]],
    semaphore: asyncio.Semaphore,
    return_exceptions: bool = True,
) -> list[_T | BaseException]:
    """Run awaitables concurrently, at most ``semaphore`` slots at a time.

    Parameters
    ----------
    coros:
        Awaitable objects to execute concurrently.
    semaphore:
        Semaphore bounding how many awaitables run simultaneously.
    return_exceptions:
        If ``True``, exceptions are returned in the results list rather
        than being raised.  Mirrors ``asyncio.gather`` semantics.

    Returns
    -------
    list[_T | BaseException]
        Results in the same order as the input coroutines.
    """

    async def _wrapped(coro: Awaitable[_T]) -> _T:
        async with semaphore:
            return await coro

    tasks = [_wrapped(c) for c in coros]
    return await asyncio.gather(*tasks, return_exceptions=return_exceptions)


async def run_with_deadline(
    coros: dict[str, Coroutine[Any, Any, _T]],
    deadline_seconds: float | None,
) -> tuple[dict[str, _T | BaseException], list[str]]:
    """Run named coroutines concurrently under one overall deadline.

    Parameters
    ----------
    coros:
        Mapping of a name (e.g. a platform) to the coroutine to run.
    deadline_seconds:
        Overall wall-clock budget.  ``None`` waits for every task.

    Returns
    -------
    tuple
        ``(settled, timed_out)`` -- ``settled`` maps each finished name to
        its result or raised exception; ``timed_out`` lists the names whose
        tasks were cancelled at the deadline, in input order.
    """
    if not coros:
        return {}, []

    tasks = {name: asyncio.create_task(coro) for name, coro in coros.items()}
    try:
        done, _pending = await asyncio.wait(tasks.values(), timeout=deadline_seconds)
    finally:
        # Also runs when the caller is cancelled mid-wait.
        unfinished = [t for t in tasks.values() if not t.done()]
        for task in unfinished:
            task.cancel()
        if unfinished:
            # Let cancellations unwind before returning.
            await asyncio.gather(*unfinished, return_exceptions=True)

    settled: dict[str, _T | BaseException] = {}
    timed_out: list[str] = []
    for name, task in tasks.items():
        if task in done:
            exc = task.exception()
            settled[name] = exc if exc is not None else task.result()
        else:
            timed_out.append(name)

    if timed_out:
        _logger.warning(
            "deadline_exceeded",
            deadline_seconds=deadline_seconds,
            cancelled=timed_out,
        )
    return settled, timed_out
