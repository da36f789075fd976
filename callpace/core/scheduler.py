"""Schedulers - run a callback after a delay, with cancellation.

Throttled and debounced wrappers never touch timers directly; they go
through a scheduler so the same state machine runs on background threads,
on an asyncio loop, or on a fake clock in tests.

Delays are in milliseconds.
"""

import asyncio
import heapq
import itertools
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class Scheduler(Protocol):
    """Timer facility used by throttle and debounce."""

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> Any:
        """Run callback once after delay_ms. Returns an opaque handle."""
        ...

    def cancel(self, handle: Any) -> None:
        """Cancel a scheduled callback. No-op if it already ran."""
        ...


class ThreadingScheduler:
    """Runs callbacks on threading.Timer daemon threads."""

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(max(0.0, delay_ms) / 1000.0, callback)
        timer.daemon = True
        timer.start()
        return timer

    def cancel(self, handle: threading.Timer) -> None:
        handle.cancel()


class AsyncioScheduler:
    """Runs callbacks on an asyncio event loop via call_later.

    Without an explicit loop, the loop running at schedule time is used, so
    wrappers must be called from inside that loop.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def schedule(
        self, delay_ms: float, callback: Callable[[], None]
    ) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(max(0.0, delay_ms) / 1000.0, callback)

    def cancel(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()


@dataclass(order=True)
class ManualTimer:
    """A callback queued on a ManualScheduler."""

    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)


class ManualScheduler:
    """Fake clock. Time only moves when advance() is called.

    Callbacks run synchronously inside advance(), in due order. Callbacks
    scheduled while advancing run in the same call if they fall due before
    the target time.
    """

    def __init__(self, start_ms: float = 0.0) -> None:
        self._now = start_ms
        self._queue: list[ManualTimer] = []
        self._seq = itertools.count()

    @property
    def now(self) -> float:
        """Current fake time in milliseconds."""
        return self._now

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self._now + max(0.0, delay_ms), next(self._seq), callback)
        heapq.heappush(self._queue, timer)
        return timer

    def cancel(self, handle: ManualTimer) -> None:
        handle.cancelled = True

    def pending_count(self) -> int:
        """Number of armed, not-cancelled timers."""
        return sum(1 for t in self._queue if not t.cancelled)

    def advance(self, ms: float) -> int:
        """Move the clock forward, firing every timer that falls due.

        Args:
            ms: Milliseconds to advance (negative values are treated as 0).

        Returns:
            Number of callbacks fired.
        """
        target = self._now + max(0.0, ms)
        fired = 0
        while self._queue and self._queue[0].due <= target:
            timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now = timer.due
            timer.callback()
            fired += 1
        self._now = target
        return fired


_default_scheduler: Scheduler | None = None


def get_default_scheduler() -> Scheduler:
    """Get the shared scheduler used when a wrapper is given none.

    Returns:
        The process-wide ThreadingScheduler, unless replaced.
    """
    global _default_scheduler
    if _default_scheduler is None:
        _default_scheduler = ThreadingScheduler()
    return _default_scheduler


def set_default_scheduler(scheduler: Scheduler | None) -> None:
    """Replace the shared scheduler (None restores the threading default)."""
    global _default_scheduler
    _default_scheduler = scheduler
    logger.debug("Default scheduler set to %r", scheduler)
