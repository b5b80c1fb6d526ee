"""Query string accessor. Blank values (``?flag=``) count as present."""

from urllib.parse import parse_qs

from junction._internal.multimap import MultiValueMap


class QueryParams(MultiValueMap):
    """Immutable parsed query string.

    Accepts the raw ``bytes`` from an ASGI scope or a ``str`` from
    ``Request.build``; ``raw`` keeps the original bytes, and a ``str`` is
    stored UTF-8 encoded.
    """

    __slots__ = ("_raw",)

    def __init__(self, query_string: bytes | str = b"") -> None:
        if isinstance(query_string, str):
            self._raw = query_string.encode("utf-8")
            text = query_string
        else:
            self._raw = query_string
            text = query_string.decode("latin-1")
        super().__init__(parse_qs(text, keep_blank_values=True))

    @property
    def raw(self) -> bytes:
        return self._raw
