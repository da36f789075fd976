"""Debounce - run a function once calls have stopped for wait_ms.

Every call restarts the quiet period, and only the latest call's arguments
are used when it finally fires. With ``leading`` enabled the first call of a
burst also runs immediately; the trailing call then only fires if more calls
followed it.
"""

import logging
from collections.abc import Callable, Mapping
from typing import Any

from callpace.config import PaceConfig, default_config
from callpace.core.options import DebounceOptions, coerce_options
from callpace.core.paced import PacedFunction, PendingCall
from callpace.core.scheduler import Scheduler

logger = logging.getLogger(__name__)


class Debouncer(PacedFunction):
    """Debounced wrapper around a function.

    States are Idle (no timer armed) and Pending (waiting for quiet).
    """

    def __init__(
        self,
        fn: Callable[..., Any],
        wait_ms: float,
        options: DebounceOptions | Mapping[str, Any] | None = None,
        scheduler: Scheduler | None = None,
        on_error: Callable[[BaseException], Any] | None = None,
        config: PaceConfig | None = None,
    ) -> None:
        """Initialize the debounced wrapper.

        Args:
            fn: Function to wrap.
            wait_ms: Quiet period in milliseconds.
            options: DebounceOptions or a mapping with ``leading``.
            scheduler: Timer facility (default: shared ThreadingScheduler).
            on_error: Receives exceptions raised by trailing invocations.
            config: Library config (default: callpace.config.default_config).
        """
        super().__init__(fn, wait_ms, scheduler, on_error, config)
        self._options = coerce_options(DebounceOptions, options)
        # A call arrived after the leading one in the current burst
        self._followed = False

    @property
    def options(self) -> DebounceOptions:
        """Whether the first call of a burst runs immediately."""
        return self._options

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        """Record the call and restart the quiet period.

        Returns:
            fn's result when this call ran on the leading edge, else None.
        """
        with self._lock:
            call = PendingCall(args, kwargs)
            if self._armed():
                self._disarm()
                self._pending = call
                self._followed = True
                self._arm()
                return None

            self._pending = call
            self._followed = False
            self._arm()
            logger.debug("%s: burst started (%gms)", self._name, self._wait_ms)
            if self._options.leading:
                return self._call(call, deferred=False)
            return None

    def _timer_fired(self) -> None:
        self._fire(deferred=True)

    def _fire(self, deferred: bool) -> Any:
        call = self._pending
        followed = self._followed
        self._pending = None
        self._followed = False
        if call is None or (self._options.leading and not followed):
            logger.debug("%s: quiet, nothing to run", self._name)
            return None
        logger.debug("%s: quiet, running trailing call", self._name)
        return self._call(call, deferred=deferred)

    def pending(self) -> bool:
        """Whether a trailing call will run when the quiet period ends."""
        with self._lock:
            if not self._armed():
                return False
            return not self._options.leading or self._followed

    def cancel(self) -> None:
        """Drop the pending call without running it.

        No-op when idle. Safe from inside the wrapped function and after the
        timer has already fired.
        """
        with self._lock:
            self._disarm()
            self._pending = None
            self._followed = False

    def flush(self) -> Any:
        """Run a pending trailing call now instead of waiting.

        Exceptions from that call propagate to the caller.

        Returns:
            The call's result, or None when nothing was pending.
        """
        with self._lock:
            if not self._armed():
                return None
            self._disarm()
            return self._fire(deferred=False)


def debounce(
    fn: Callable[..., Any],
    wait_ms: float,
    options: DebounceOptions | Mapping[str, Any] | None = None,
    *,
    scheduler: Scheduler | None = None,
    on_error: Callable[[BaseException], Any] | None = None,
    config: PaceConfig | None = None,
) -> Debouncer:
    """Wrap fn so it runs wait_ms after the last call of a burst.

    Args:
        fn: Function to wrap.
        wait_ms: Quiet period in milliseconds.
        options: DebounceOptions or a mapping with ``leading``.
        scheduler: Timer facility (default: threads).
        on_error: Receives exceptions from trailing invocations.
        config: Library config (default: callpace.config.default_config).

    Returns:
        The debounced wrapper, with cancel() and flush().
    """
    return Debouncer(
        fn, wait_ms, options, scheduler=scheduler, on_error=on_error, config=config
    )


def debounced(
    wait_ms: float | Callable[..., Any] | None = None,
    *,
    leading: bool = False,
    scheduler: Scheduler | None = None,
    on_error: Callable[[BaseException], Any] | None = None,
    config: PaceConfig | None = None,
) -> Debouncer | Callable[[Callable[..., Any]], Debouncer]:
    """Decorator form of debounce(), bare (``@debounced``) or with arguments."""
    options = DebounceOptions(leading=leading)
    func = wait_ms if callable(wait_ms) else None
    wait = None if func is not None else wait_ms

    def decorator(fn: Callable[..., Any]) -> Debouncer:
        cfg = config or default_config
        return Debouncer(
            fn,
            cfg.default_wait_ms if wait is None else wait,
            options,
            scheduler=scheduler,
            on_error=on_error,
            config=config,
        )

    return decorator(func) if func is not None else decorator
