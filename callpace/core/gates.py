"""Invocation gates - call through based on how many times a wrapper ran."""

import functools
from collections.abc import Callable
from typing import Any


def after(n: int, fn: Callable[..., Any]) -> Callable[..., Any]:
    """Only call fn from the n-th call onwards.

    Args:
        n: Number of calls needed before fn runs. n <= 1 calls through always.
        fn: Function to wrap.

    Returns:
        Wrapper that returns None until the gate opens, then fn's result.
    """
    count = 0

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        nonlocal count
        count += 1
        if count >= n:
            return fn(*args, **kwargs)
        return None

    return wrapper


def before(n: int, fn: Callable[..., Any]) -> Callable[..., Any]:
    """Call fn for the first n calls, then keep returning the last result.

    Args:
        n: Number of calls that reach fn. n <= 0 never calls fn.
        fn: Function to wrap.

    Returns:
        Wrapper returning fn's result, or the n-th result once exhausted.
    """
    count = 0
    result = None

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        nonlocal count, result
        count += 1
        if count <= n:
            result = fn(*args, **kwargs)
        return result

    return wrapper
