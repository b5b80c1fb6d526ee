"""Invoke helpers — call sync or async handlers uniformly.

Handlers and startup hooks can be ``def`` or ``async def``. Any code that
calls a user-provided callable from async code goes through this helper
so the sync/async check lives in exactly one place.

Usage::

    from junction._internal.invoke import invoke

    result = await invoke(handler, request, output)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's awaitable."""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
