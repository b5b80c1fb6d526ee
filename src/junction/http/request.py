"""Immutable HTTP request.

The read-only view of an incoming request that routing and binding need:
method, path, query accessor, body bytes with their content type, and the
parsed URL-encoded and multipart forms.  The body is read by the server
before the request is built, so every accessor here is synchronous.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from junction.http.forms import FormData, parse_multipart, parse_urlencoded
from junction.http.headers import Headers
from junction.http.query import QueryParams

FORM_URLENCODED = "application/x-www-form-urlencoded"
MULTIPART_FORM = "multipart/form-data"
APPLICATION_JSON = "application/json"


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``path_params`` is empty until the router dispatches the request; the
    handler receives a copy carrying the captures of the matched route.
    """

    method: str
    path: str
    headers: Headers = field(default_factory=Headers)
    query: QueryParams = field(default_factory=QueryParams)
    body: bytes = b""
    path_params: dict[str, str] = field(default_factory=dict)
    http_version: str = "1.1"
    client: tuple[str, int] | None = None

    # Private: parsed body cache (dict contents are mutable even though
    # the field reference is frozen)
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value, parameters included."""
        return self.headers.get("content-type")

    @property
    def media_type(self) -> str:
        """Content type without parameters, lowercased. Empty if absent."""
        return (self.content_type or "").split(";", 1)[0].strip().lower()

    @property
    def url(self) -> str:
        """Request path plus query string."""
        qs = self.query.raw
        if qs:
            return f"{self.path}?{qs.decode('utf-8', 'replace')}"
        return self.path

    # -- Body access --

    def text(self) -> str:
        """The body decoded as UTF-8. Raises ``UnicodeDecodeError``."""
        return self.body.decode("utf-8")

    def json(self) -> Any:
        """Parse the body as JSON.

        Raises ``ValueError`` (``json.JSONDecodeError`` or
        ``UnicodeDecodeError``) on malformed input.
        """
        if "_json" not in self._cache:
            self._cache["_json"] = json.loads(self.text())
        return self._cache["_json"]

    @property
    def post(self) -> FormData:
        """URL-encoded body fields. Empty for any other content type."""
        if "_post" not in self._cache:
            if self.media_type == FORM_URLENCODED:
                self._cache["_post"] = parse_urlencoded(self.body)
            else:
                self._cache["_post"] = FormData()
        return self._cache["_post"]

    @property
    def form(self) -> FormData:
        """Multipart body fields and files. Empty for any other content type.

        Raises ``ValueError`` if the multipart body is malformed.
        """
        if "_form" not in self._cache:
            if self.media_type == MULTIPART_FORM:
                self._cache["_form"] = parse_multipart(self.body, self.content_type or "")
            else:
                self._cache["_form"] = FormData()
        return self._cache["_form"]

    # -- Factories --

    @classmethod
    def from_asgi(
        cls,
        scope: Mapping[str, Any],
        body: bytes = b"",
        path_params: dict[str, str] | None = None,
    ) -> Request:
        """Create a Request from an ASGI scope and the already-read body."""
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=Headers(tuple(tuple(pair) for pair in scope.get("headers", ()))),
            query=QueryParams(scope.get("query_string", b"")),
            body=body,
            path_params=path_params or {},
            http_version=scope.get("http_version", "1.1"),
            client=tuple(client) if client else None,
        )

    @classmethod
    def build(
        cls,
        method: str,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        body: bytes = b"",
        path_params: dict[str, str] | None = None,
    ) -> Request:
        """Create a Request from a path that may carry a query string.

        Convenient outside a server, e.g. in tests::

            Request.build("GET", "/search?q=hello&page=2")
        """
        path_part, _, query_string = path.partition("?")
        return cls(
            method=method.upper(),
            path=path_part,
            headers=Headers.from_dict(headers or {}),
            query=QueryParams(query_string),
            body=body,
            path_params=path_params or {},
        )
