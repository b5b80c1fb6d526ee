"""Request-scoped context via ContextVar.

Provides:
- ``request_var``: The current ``Request`` for this task/thread.
- ``path_params_var``: The captures of the route that matched it.

Both are set by ``Router.dispatch`` for the duration of the handler call
and reset afterwards, so nothing leaks into the next request.  Calling
``get_request()`` outside a dispatch raises ``LookupError``.

Thread safety:
    ``ContextVar`` is task-local under asyncio and thread-local under
    threaded servers. No locks needed.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from junction.http.request import Request

request_var: ContextVar[Request] = ContextVar("junction_request")
"""The request being handled. Set by the router before calling a handler."""

path_params_var: ContextVar[dict[str, str]] = ContextVar("junction_path_params")
"""Captured path params of the matched route."""


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()


def get_path_params() -> dict[str, str]:
    """Return the path params captured for the current request.

    Outside a dispatch this is an empty dict rather than an error, so
    ``bind()`` can be used on requests built by hand.
    """
    return path_params_var.get({})


@contextmanager
def request_scope(request: Request) -> Iterator[Request]:
    """Publish *request* and its path params for the duration of a block.

    Both variables are restored on exit, including when the block raises.
    """
    request_token = request_var.set(request)
    params_token = path_params_var.set(request.path_params)
    try:
        yield request
    finally:
        path_params_var.reset(params_token)
        request_var.reset(request_token)
