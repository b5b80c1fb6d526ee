"""The writable side of a request: status, headers, and body.

Handlers receive an ``Output`` alongside the ``Request``::

    @app.get("/ping")
    def ping(request: Request, output: Output) -> None:
        output.write_json_body({"ok": True})

Unlike ``Request`` this object is mutable.  One is created per request
and never shared.
"""

from __future__ import annotations

import dataclasses
import json as json_module
from collections.abc import Mapping
from typing import Any

from junction.http.response import Response

JSON_CONTENT_TYPE = "application/json"


def _json_default(value: Any) -> Any:
    """Serialise dataclass instances and other iterables ``json`` rejects."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, set | frozenset):
        return list(value)
    msg = f"Object of type {type(value).__name__} is not JSON serializable"
    raise TypeError(msg)


def to_json(data: Any, *, indent: int | None = None) -> str:
    """Serialise *data* to JSON text.

    Dataclass instances become objects, sets become arrays.  Anything else
    the standard ``json`` module cannot encode raises ``TypeError``.
    """
    return json_module.dumps(data, default=_json_default, indent=indent, ensure_ascii=False)


class Output:
    """Mutable response builder handed to every handler.

    Attributes:
        status: HTTP status code, 200 until changed.
    """

    __slots__ = ("_chunks", "_headers", "json_indent", "status")

    def __init__(self, *, json_indent: int | None = None) -> None:
        self.status: int = 200
        self.json_indent = json_indent
        self._headers: list[tuple[str, str]] = []
        self._chunks: list[bytes] = []

    @property
    def headers(self) -> tuple[tuple[str, str], ...]:
        return tuple(self._headers)

    def add_header(self, name: str, value: str) -> None:
        """Append a response header. Repeated names are all sent."""
        self._headers.append((name, value))

    def set_content_type(self, content_type: str) -> None:
        """Set the ``Content-Type`` header, replacing any earlier value."""
        self._headers = [(k, v) for k, v in self._headers if k.lower() != "content-type"]
        self.add_header("Content-Type", content_type)

    def write(self, data: str | bytes) -> None:
        """Append *data* to the body. ``str`` is encoded as UTF-8."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._chunks.append(data)

    def write_json_body(self, data: Any, status: int = 200) -> None:
        """Serialise *data* to JSON and write it with *status*.

        Sets ``Content-Type: application/json``.
        """
        self.status = status
        self.set_content_type(JSON_CONTENT_TYPE)
        self.write(to_json(data, indent=self.json_indent))

    @property
    def body(self) -> bytes:
        return b"".join(self._chunks)

    def to_response(self) -> Response:
        """Snapshot what has been written so far."""
        return Response(status=self.status, headers=self.headers, body=self.body)
