"""Tests for callpace.core.scheduler."""

import asyncio
import threading
from unittest.mock import MagicMock

import pytest

from callpace.core.debounce import debounce
from callpace.core.scheduler import (
    AsyncioScheduler,
    ManualScheduler,
    ThreadingScheduler,
    get_default_scheduler,
    set_default_scheduler,
)
from callpace.core.throttle import throttle


class TestManualScheduler:
    """Tests for the fake clock."""

    def test_fires_in_due_order(self):
        """Callbacks due together run in scheduling order."""
        clock = ManualScheduler()
        fired = []
        clock.schedule(30, lambda: fired.append("b"))
        clock.schedule(10, lambda: fired.append("a"))
        clock.schedule(30, lambda: fired.append("c"))

        assert clock.advance(30) == 3
        assert fired == ["a", "b", "c"]

    def test_nothing_before_due(self):
        """Advancing short of the due time runs nothing."""
        clock = ManualScheduler()
        cb = MagicMock()
        clock.schedule(10, cb)
        clock.advance(9)
        cb.assert_not_called()
        assert clock.now == 9

    def test_cancel(self):
        """Canceled callbacks never run."""
        clock = ManualScheduler()
        cb = MagicMock()
        handle = clock.schedule(10, cb)
        clock.cancel(handle)
        assert clock.pending_count() == 0
        assert clock.advance(20) == 0
        cb.assert_not_called()

    def test_callback_sees_due_time(self):
        """now reads the due time while a callback runs."""
        clock = ManualScheduler(start_ms=100)
        seen = []
        clock.schedule(25, lambda: seen.append(clock.now))
        clock.advance(50)
        assert seen == [125]
        assert clock.now == 150

    def test_chained_callbacks_in_one_advance(self):
        """Callbacks scheduled while advancing run if they fall due."""
        clock = ManualScheduler()
        fired = []

        def first():
            fired.append(clock.now)
            clock.schedule(10, lambda: fired.append(clock.now))

        clock.schedule(10, first)
        clock.advance(25)
        assert fired == [10, 20]

    def test_negative_values_treated_as_zero(self):
        """Negative delays and advances count as 0."""
        clock = ManualScheduler()
        cb = MagicMock()
        clock.schedule(-5, cb)
        clock.advance(-10)
        cb.assert_called_once()
        assert clock.now == 0


class TestThreadingScheduler:
    """Tests for the threading.Timer scheduler."""

    def test_runs_callback(self):
        """The callback runs on a timer thread."""
        done = threading.Event()
        ThreadingScheduler().schedule(10, done.set)
        assert done.wait(timeout=1.0)

    def test_cancel(self):
        """A canceled timer never fires."""
        scheduler = ThreadingScheduler()
        done = threading.Event()
        handle = scheduler.schedule(50, done.set)
        scheduler.cancel(handle)
        assert not done.wait(timeout=0.1)

    def test_timers_are_daemon(self):
        """Timers never keep the interpreter alive."""
        handle = ThreadingScheduler().schedule(1000, lambda: None)
        assert handle.daemon
        handle.cancel()


class TestDefaultScheduler:
    """Tests for the shared default."""

    def teardown_method(self):
        set_default_scheduler(None)

    def test_default_is_threading(self):
        """The shared default is a single ThreadingScheduler."""
        assert isinstance(get_default_scheduler(), ThreadingScheduler)
        assert get_default_scheduler() is get_default_scheduler()

    def test_wrappers_use_replaced_default(self):
        """Wrappers built without a scheduler pick up the new default."""
        clock = ManualScheduler()
        set_default_scheduler(clock)
        fn = MagicMock()
        debounced_fn = debounce(fn, 10)
        debounced_fn()
        clock.advance(10)
        fn.assert_called_once()


class TestAsyncioScheduler:
    """Wrappers driven by an event loop."""

    @pytest.mark.asyncio
    async def test_debounce_on_loop(self):
        """Debounce fires from the event loop."""
        fn = MagicMock()
        debounced_fn = debounce(fn, 20, scheduler=AsyncioScheduler())
        debounced_fn(1)
        debounced_fn(2)
        await asyncio.sleep(0.01)
        debounced_fn(3)
        await asyncio.sleep(0.06)
        fn.assert_called_once_with(3)

    @pytest.mark.asyncio
    async def test_throttle_on_loop(self):
        """Throttle runs leading now and trailing from the loop."""
        fn = MagicMock(return_value="x")
        throttled_fn = throttle(fn, 20, scheduler=AsyncioScheduler())
        assert throttled_fn() == "x"
        throttled_fn()
        assert fn.call_count == 1
        await asyncio.sleep(0.06)
        assert fn.call_count == 2

    @pytest.mark.asyncio
    async def test_cancel_on_loop(self):
        """cancel() removes the loop callback."""
        fn = MagicMock()
        debounced_fn = debounce(fn, 10, scheduler=AsyncioScheduler())
        debounced_fn()
        debounced_fn.cancel()
        await asyncio.sleep(0.03)
        fn.assert_not_called()

    @pytest.mark.asyncio
    async def test_explicit_loop(self):
        """An explicitly passed loop is used."""
        loop = asyncio.get_running_loop()
        done = asyncio.Event()
        AsyncioScheduler(loop).schedule(5, done.set)
        await asyncio.wait_for(done.wait(), timeout=1.0)
