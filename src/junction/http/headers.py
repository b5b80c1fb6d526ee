"""Request headers, case-insensitive, from the ASGI scope's byte pairs."""

from __future__ import annotations

from collections.abc import Mapping

from junction._internal.multimap import MultiValueMap


class Headers(MultiValueMap):
    """Immutable request headers.

    Names are folded to lowercase once, at construction; values are
    decoded as latin-1.  A name sent twice keeps both values in order.
    """

    __slots__ = ()

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        data: dict[str, list[str]] = {}
        for name, value in raw:
            data.setdefault(name.decode("latin-1").lower(), []).append(value.decode("latin-1"))
        super().__init__(data)

    @classmethod
    def from_dict(cls, headers: Mapping[str, str]) -> Headers:
        """Build from ``str`` pairs, e.g. in tests or hand-built requests."""
        return cls(
            tuple((name.encode("latin-1"), value.encode("latin-1")) for name, value in headers.items())
        )

    def _normalize(self, key: str) -> str:
        return key.lower()
