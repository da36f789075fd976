"""Memoize - cache results keyed by a hash of the arguments.

The cache is unbounded and never evicted. Put an eviction policy in front
of it if memory matters.
"""

import functools
from collections.abc import Callable, Hashable
from types import MappingProxyType
from typing import Any


def first_arg_hash(*args: Any, **kwargs: Any) -> Hashable:
    """Default key: the first positional argument (None without one).

    Calls that differ only after the first argument share a cache entry;
    pass a hasher to memoize() if that matters.

    Unhashable arguments (lists, dicts) are keyed by their type and repr at
    call time, so equal-looking values share an entry.
    """
    if not args:
        return None
    key = args[0]
    try:
        hash(key)
    except TypeError:
        return (type(key).__qualname__, repr(key))
    return key


def memoize(
    fn: Callable[..., Any], hasher: Callable[..., Hashable] | None = None
) -> Callable[..., Any]:
    """Cache fn's results.

    Args:
        fn: Function to wrap.
        hasher: Maps the call's arguments to a cache key.

    Returns:
        Wrapper with a read-only ``cache`` attribute.
    """
    cache: dict[Hashable, Any] = {}
    key_for = hasher or first_arg_hash

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        key = key_for(*args, **kwargs)
        if key in cache:
            return cache[key]
        result = fn(*args, **kwargs)
        cache[key] = result
        return result

    wrapper.cache = MappingProxyType(cache)
    return wrapper
