"""Junction exception hierarchy.

Shared across the router, the binder, and the ASGI glue so every module
raises and catches the same types.
"""

from __future__ import annotations

from dataclasses import dataclass


class JunctionError(Exception):
    """Base for all junction-specific errors."""


class ConfigurationError(JunctionError):
    """Raised when routes or bound record types are declared incorrectly.

    Surfaces during startup (route registration, first ``field_specs()``
    call) rather than silently mismatching at request time.
    """


class ParamsParseError(JunctionError):
    """Raised by ``bind()`` when request data cannot populate a record.

    Attributes:
        message: Human-readable cause, e.g.
            ``Failed to parse "page". Invalid content``.
        param: External param name of the offending field, or ``None``
            for body-level failures such as ``Invalid JSON``.
    """

    def __init__(self, message: str, param: str | None = None) -> None:
        self.message = message
        self.param = param
        super().__init__(message)

    @classmethod
    def invalid_content(cls, param: str) -> ParamsParseError:
        return cls(f'Failed to parse "{param}". Invalid content', param)


@dataclass(frozen=True, slots=True)
class HTTPError(JunctionError):
    """An error that maps directly to an HTTP status code.

    Only the ASGI glue raises these; the routing core reports a miss
    by returning ``None``.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405 — the request method is not one the router dispatches.

    Includes an ``Allow`` header listing the dispatched methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )


class PayloadTooLarge(HTTPError):  # noqa: N818
    """413 — request body exceeds ``AppConfig.max_content_length``."""

    def __init__(self, limit: int) -> None:
        super().__init__(status=413, detail=f"Request body exceeds {limit} bytes")
