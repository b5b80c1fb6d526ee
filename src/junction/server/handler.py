"""ASGI handler — translates ASGI scope/messages to junction types.

The only component that touches raw ASGI HTTP messages. Reads the body,
builds the Request, dispatches through the router, and sends the
handler's Output back through ASGI send().
"""

import logging
import time

from junction._internal.asgi import Receive, Scope, Send
from junction.config import AppConfig
from junction.errors import HTTPError, MethodNotAllowed, NotFound, ParamsParseError, PayloadTooLarge
from junction.http.output import Output
from junction.http.request import Request
from junction.http.response import Response
from junction.routing.router import METHODS, Router
from junction.server.errors import (
    bind_error_response,
    http_error_response,
    internal_error_response,
)
from junction.server.sender import send_response

logger = logging.getLogger("junction.server")


async def read_body(receive: Receive, limit: int) -> bytes:
    """Collect the request body from ASGI ``http.request`` messages.

    Raises ``PayloadTooLarge`` once more than *limit* bytes arrive.
    """
    chunks: list[bytes] = []
    size = 0
    while True:
        message = await receive()
        if message["type"] == "http.disconnect":
            break
        chunk = message.get("body", b"")
        size += len(chunk)
        if size > limit:
            raise PayloadTooLarge(limit)
        if chunk:
            chunks.append(chunk)
        if not message.get("more_body", False):
            break
    return b"".join(chunks)


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    config: AppConfig,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    started = time.perf_counter()
    method: str = scope["method"]
    path: str = scope["path"]

    response: Response
    try:
        if method.upper() not in METHODS:
            raise MethodNotAllowed(METHODS)

        body = await read_body(receive, config.max_content_length)
        request = Request.from_asgi(scope, body)
        output = Output(json_indent=config.json_indent)

        if not await router.dispatch_async(request, output):
            raise NotFound(f"No route matches {method} {path!r}")
        response = output.to_response()

    except HTTPError as exc:
        response = http_error_response(exc, method, path)
    except ParamsParseError as exc:
        response = bind_error_response(exc, method, path)
    except Exception:
        response = internal_error_response(method, path)

    if config.debug:
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.debug("Response %s %s - %d (%.3fms)", method, path, response.status, elapsed_ms)

    await send_response(response, send)
