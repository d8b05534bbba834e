"""Helpers for user-supplied callbacks."""
import inspect
from typing import Any, Callable


async def invoke(callback: Callable[..., Any], *args: Any) -> Any:
    """Call a handler that may be either a plain function or a coroutine function."""
    result = callback(*args)
    if inspect.isawaitable(result):
        result = await result
    return result
