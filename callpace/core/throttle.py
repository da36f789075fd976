"""Throttle - run a function at most once per window.

A call while idle opens a window of ``wait_ms``. Calls inside the window are
recorded but not run; the latest one runs when the window closes (trailing
edge), which opens a fresh window. A continuous stream of calls therefore
produces one invocation per ``wait_ms``.

The wrapper always returns synchronously with the result of the most recent
real invocation, which may be None before the first one.
"""

import logging
from collections.abc import Callable, Mapping
from typing import Any

from callpace.config import PaceConfig, default_config
from callpace.core.options import ThrottleOptions, coerce_options
from callpace.core.paced import FAILED, PacedFunction, PendingCall
from callpace.core.scheduler import Scheduler

logger = logging.getLogger(__name__)


class Throttler(PacedFunction):
    """Throttled wrapper around a function.

    States are Idle (no timer armed) and Windowed (timer armed). A trailing
    call is pending when a call arrived during the window and trailing is
    enabled.
    """

    def __init__(
        self,
        fn: Callable[..., Any],
        wait_ms: float,
        options: ThrottleOptions | Mapping[str, Any] | None = None,
        scheduler: Scheduler | None = None,
        on_error: Callable[[BaseException], Any] | None = None,
        config: PaceConfig | None = None,
    ) -> None:
        """Initialize the throttled wrapper.

        Args:
            fn: Function to wrap.
            wait_ms: Window length in milliseconds.
            options: ThrottleOptions or a mapping with ``leading``/``trailing``.
            scheduler: Timer facility (default: shared ThreadingScheduler).
            on_error: Receives exceptions raised by trailing invocations.
            config: Library config (default: callpace.config.default_config).
        """
        super().__init__(fn, wait_ms, scheduler, on_error, config)
        self._options = coerce_options(ThrottleOptions, options)
        self._trailing_pending = False
        self._last_result: Any = None
        if not (self._options.leading or self._options.trailing):
            logger.warning(
                "Throttle on %s has leading and trailing disabled; it will never run",
                self._name,
            )

    @property
    def options(self) -> ThrottleOptions:
        """Edges this wrapper runs on."""
        return self._options

    @property
    def last_result(self) -> Any:
        """Result of the most recent real invocation."""
        return self._last_result

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        """Run fn now, queue a trailing call, or drop the call.

        Returns:
            The last real result (None before the first invocation).
        """
        with self._lock:
            call = PendingCall(args, kwargs)
            if self._armed():
                self._pending = call
                if self._options.trailing:
                    self._trailing_pending = True
                return self._last_result

            self._arm()
            logger.debug("%s: window opened (%gms)", self._name, self._wait_ms)
            if self._options.leading:
                self._last_result = self._call(call, deferred=False)
            else:
                self._pending = call
                self._trailing_pending = self._options.trailing
            return self._last_result

    def _timer_fired(self) -> None:
        self._close_window(deferred=True)

    def _close_window(self, deferred: bool) -> None:
        if self._trailing_pending and self._pending is not None:
            call = self._pending
            self._pending = None
            self._trailing_pending = False
            # Re-arm before invoking so cancel() from inside fn sticks
            self._arm()
            logger.debug("%s: trailing call, window reopened", self._name)
            result = self._call(call, deferred=deferred)
            if result is not FAILED:
                self._last_result = result
            return
        self._pending = None
        self._trailing_pending = False
        logger.debug("%s: window closed", self._name)

    def pending(self) -> bool:
        """Whether a trailing call is queued for the end of the window."""
        with self._lock:
            return self._trailing_pending

    def cancel(self) -> None:
        """Drop any pending trailing call and return to idle.

        The last result is kept. Safe to call at any time, including from
        inside the wrapped function.
        """
        with self._lock:
            self._disarm()
            self._pending = None
            self._trailing_pending = False

    def flush(self) -> Any:
        """Close the current window now, running a pending trailing call.

        Exceptions from that call propagate to the caller.

        Returns:
            The last result after flushing.
        """
        with self._lock:
            if self._armed():
                self._disarm()
                self._close_window(deferred=False)
            return self._last_result


def throttle(
    fn: Callable[..., Any],
    wait_ms: float,
    options: ThrottleOptions | Mapping[str, Any] | None = None,
    *,
    scheduler: Scheduler | None = None,
    on_error: Callable[[BaseException], Any] | None = None,
    config: PaceConfig | None = None,
) -> Throttler:
    """Wrap fn so it runs at most once per wait_ms.

    Args:
        fn: Function to wrap.
        wait_ms: Window length in milliseconds.
        options: ThrottleOptions or a mapping with ``leading``/``trailing``.
        scheduler: Timer facility (default: threads).
        on_error: Receives exceptions from trailing invocations.
        config: Library config (default: callpace.config.default_config).

    Returns:
        The throttled wrapper.
    """
    return Throttler(
        fn, wait_ms, options, scheduler=scheduler, on_error=on_error, config=config
    )


def throttled(
    wait_ms: float | Callable[..., Any] | None = None,
    *,
    leading: bool = True,
    trailing: bool = True,
    scheduler: Scheduler | None = None,
    on_error: Callable[[BaseException], Any] | None = None,
    config: PaceConfig | None = None,
) -> Throttler | Callable[[Callable[..., Any]], Throttler]:
    """Decorator form of throttle().

    Usable bare (``@throttled``) or with arguments
    (``@throttled(50)``, ``@throttled(wait_ms=50, trailing=False)``).
    """
    options = ThrottleOptions(leading=leading, trailing=trailing)
    func = wait_ms if callable(wait_ms) else None
    wait = None if func is not None else wait_ms

    def decorator(fn: Callable[..., Any]) -> Throttler:
        cfg = config or default_config
        return Throttler(
            fn,
            cfg.default_wait_ms if wait is None else wait,
            options,
            scheduler=scheduler,
            on_error=on_error,
            config=config,
        )

    return decorator(func) if func is not None else decorator
