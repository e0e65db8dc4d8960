"""
Schedulers - One-shot timers for the delayed unlock.

The engine needs exactly one timer operation: run a callback once after a
delay. Nothing is ever cancelled; shutting down just stops dispatching.

- AsyncioScheduler: runs callbacks on an asyncio event loop (server)
- ManualScheduler: runs callbacks when its clock is advanced (tests, CLI)
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable
import asyncio
import heapq
import inspect
import itertools
import logging

logger = logging.getLogger(__name__)

Callback = Callable[[], Any]


class Scheduler(ABC):
    """Timer service used by the game service."""

    @abstractmethod
    def schedule(self, callback: Callback, delay_ms: int) -> None:
        """Run callback once, delay_ms milliseconds from now."""


class AsyncioScheduler(Scheduler):
    """
    Schedules callbacks on an asyncio loop.

    Awaitable results are scheduled on the same loop, so callbacks may be async.
    Their tasks are kept until done; failures are logged.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop
        self._tasks: set[asyncio.Future] = set()

    @property
    def running(self) -> int:
        """Number of async callbacks still in flight."""
        return len(self._tasks)

    def schedule(self, callback: Callback, delay_ms: int) -> None:
        loop = self._loop or asyncio.get_running_loop()
        loop.call_later(delay_ms / 1000, self._run, loop, callback)

    def _run(self, loop: asyncio.AbstractEventLoop, callback: Callback) -> None:
        result = callback()
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result, loop=loop)
            self._tasks.add(task)
            task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Future) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Scheduled callback failed: %s", error, exc_info=error)


async def _consume(awaitable: Awaitable) -> Any:
    return await awaitable


def run_to_completion(awaitable: Awaitable) -> Any:
    """Run an awaitable on a fresh event loop; fails inside a running loop."""
    return asyncio.run(_consume(awaitable))


@dataclass(order=True)
class _Timer:
    due_ms: int
    seq: int
    callback: Callback = field(compare=False)


class ManualScheduler(Scheduler):
    """
    Scheduler driven by an explicit clock.

    Awaitable callback results are handed to runner and finished before the
    next timer fires. The default runner uses a fresh event loop; code that
    owns a loop in another thread passes a runner that submits to it.

    Usage:
        scheduler = ManualScheduler()
        service = GameService(scheduler=scheduler)
        ...
        scheduler.advance(800)  # fires every timer due by then
    """

    def __init__(self, runner: Callable[[Awaitable], Any] | None = None):
        self.now_ms = 0
        self.runner = runner or run_to_completion
        self._timers: list[_Timer] = []
        self._seq = itertools.count()

    @property
    def pending(self) -> int:
        return len(self._timers)

    def schedule(self, callback: Callback, delay_ms: int) -> None:
        heapq.heappush(
            self._timers,
            _Timer(due_ms=self.now_ms + max(0, delay_ms), seq=next(self._seq), callback=callback),
        )

    def advance(self, ms: int) -> int:
        """Move the clock forward and fire due timers in order. Returns how many fired."""
        target = self.now_ms + ms
        fired = 0
        while self._timers and self._timers[0].due_ms <= target:
            timer = heapq.heappop(self._timers)
            self.now_ms = timer.due_ms
            self._fire(timer)
            fired += 1
        self.now_ms = target
        return fired

    def run_all(self) -> int:
        """Fire every pending timer regardless of due time."""
        fired = 0
        while self._timers:
            timer = heapq.heappop(self._timers)
            self.now_ms = max(self.now_ms, timer.due_ms)
            self._fire(timer)
            fired += 1
        return fired

    def clear(self) -> None:
        """Drop pending timers without firing them."""
        if self._timers:
            logger.debug("Dropping %d pending timer(s)", len(self._timers))
        self._timers.clear()

    def _fire(self, timer: _Timer) -> None:
        result = timer.callback()
        if inspect.isawaitable(result):
            self.runner(result)
