"""Error responses for the ASGI pipeline.

Maps HTTPError exceptions, binding failures, and unexpected handler
exceptions to Response objects.
"""

import logging

from junction.errors import HTTPError, ParamsParseError
from junction.http.output import Output
from junction.http.response import Response

logger = logging.getLogger("junction.server")


def http_error_response(exc: HTTPError, method: str, path: str) -> Response:
    """Plain-text response carrying the error's status, detail and headers."""
    logger.debug("%d %s %s — %s", exc.status, method, path, exc.detail)
    output = Output()
    output.status = exc.status
    output.set_content_type("text/plain; charset=utf-8")
    for name, value in exc.headers:
        output.add_header(name, value)
    output.write(exc.detail or str(exc.status))
    return output.to_response()


def bind_error_response(exc: ParamsParseError, method: str, path: str) -> Response:
    """400 with ``{"error": <message>}`` for a bind the handler did not catch."""
    logger.debug("400 %s %s — %s", method, path, exc.message)
    output = Output()
    output.write_json_body({"error": exc.message}, status=400)
    return output.to_response()


def internal_error_response(method: str, path: str) -> Response:
    """Log the active exception and return a bare 500.

    Must be called from inside an ``except`` block.
    """
    logger.exception("500 %s %s", method, path)
    output = Output()
    output.status = 500
    output.set_content_type("text/plain; charset=utf-8")
    output.write("Internal Server Error")
    return output.to_response()
