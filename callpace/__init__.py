"""callpace - throttle, debounce, before/after gates and memoize.

Throttled and debounced wrappers run on threading timers by default; pass a
scheduler (asyncio or manual clock) to change that.
"""

from callpace.core.debounce import Debouncer, debounce, debounced
from callpace.core.gates import after, before
from callpace.core.memoize import memoize
from callpace.core.options import DebounceOptions, ThrottleOptions
from callpace.core.scheduler import (
    AsyncioScheduler,
    ManualScheduler,
    ThreadingScheduler,
    set_default_scheduler,
)
from callpace.core.throttle import Throttler, throttle, throttled

__all__ = [
    "AsyncioScheduler",
    "DebounceOptions",
    "Debouncer",
    "ManualScheduler",
    "ThreadingScheduler",
    "ThrottleOptions",
    "Throttler",
    "after",
    "before",
    "debounce",
    "debounced",
    "memoize",
    "set_default_scheduler",
    "throttle",
    "throttled",
]

__version__ = "0.1.0"
