"""Shared machinery for timer-driven wrappers (throttle and debounce).

A paced wrapper owns one wrapped function, one immutable wait, and at most
one armed timer. Every state change, and the call-through it triggers,
happens under a re-entrant lock, so a timer firing is a single atomic step
relative to wrapper calls, and the wrapped function may call back into its
own wrapper (including cancel()).
"""

import functools
import logging
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from callpace.config import PaceConfig, resolve_wait
from callpace.core.scheduler import Scheduler, get_default_scheduler

logger = logging.getLogger(__name__)

# Returned by deferred invocations that raised
FAILED = object()


@dataclass
class PendingCall:
    """Arguments of the most recent call, waiting for a deferred invocation."""

    args: tuple[Any, ...]
    kwargs: dict[str, Any]
    timestamp: float = field(default_factory=time.monotonic)


class PacedFunction(ABC):
    """Base class for wrappers that defer calls through a Scheduler."""

    def __init__(
        self,
        fn: Callable[..., Any],
        wait_ms: float,
        scheduler: Scheduler | None = None,
        on_error: Callable[[BaseException], Any] | None = None,
        config: PaceConfig | None = None,
    ) -> None:
        """Initialize the wrapper.

        Args:
            fn: Function to wrap.
            wait_ms: Window / quiet period in milliseconds.
            scheduler: Timer facility (default: shared ThreadingScheduler).
            on_error: Receives exceptions raised by deferred invocations.
                Without it they are logged.
            config: Library config (default: callpace.config.default_config).
        """
        self._fn = fn
        self._wait_ms = resolve_wait(wait_ms, config)
        self._scheduler = scheduler or get_default_scheduler()
        self._on_error = on_error
        self._lock = threading.RLock()
        self._handle: Any = None
        self._token: object | None = None
        self._pending: PendingCall | None = None
        self._name = getattr(fn, "__qualname__", None) or repr(fn)
        functools.update_wrapper(self, fn, updated=())

    @property
    def wait_ms(self) -> float:
        """Window length in milliseconds."""
        return self._wait_ms

    def _armed(self) -> bool:
        return self._token is not None

    def _arm(self) -> None:
        """Schedule _timer_fired after wait_ms, superseding any armed timer."""
        token = object()
        self._token = token
        self._handle = self._scheduler.schedule(
            self._wait_ms, lambda: self._on_timer(token)
        )

    def _disarm(self) -> None:
        if self._handle is not None:
            self._scheduler.cancel(self._handle)
        self._handle = None
        self._token = None

    def _on_timer(self, token: object) -> None:
        with self._lock:
            # Canceled or superseded while this timer was in flight
            if token is not self._token:
                return
            self._handle = None
            self._token = None
            self._timer_fired()

    @abstractmethod
    def _timer_fired(self) -> None:
        """Handle the armed timer firing. Runs under the lock."""

    def _call(self, pending: PendingCall, deferred: bool) -> Any:
        """Invoke the wrapped function with a stored call's arguments.

        Deferred invocations have no caller to raise into, so their
        exceptions go to on_error (or the log) and FAILED is returned.
        """
        if not deferred:
            return self._fn(*pending.args, **pending.kwargs)
        try:
            return self._fn(*pending.args, **pending.kwargs)
        except Exception as e:
            if self._on_error is None:
                logger.exception("Deferred call to %s failed", self._name)
            else:
                self._report(e)
        return FAILED

    def _report(self, error: Exception) -> None:
        try:
            self._on_error(error)
        except Exception:
            logger.exception("on_error hook for %s failed", self._name)

    @abstractmethod
    def pending(self) -> bool:
        """Whether a deferred invocation is queued."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._name} wait={self._wait_ms:g}ms>"
