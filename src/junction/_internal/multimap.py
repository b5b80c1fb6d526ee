"""Multi-value string mappings shared by QueryParams, FormData and Headers.

``ParamSource`` is the structural protocol the binder walks;
``MultiValueMap`` is the concrete read-only base the request accessors
build on.
"""

from collections.abc import Iterator, Mapping
from typing import Protocol, runtime_checkable


@runtime_checkable
class ParamSource(Protocol):
    """A read-only string mapping where keys can have multiple values.

    ``has``/``read`` are the accessors the binder uses; ``read`` returns
    the first value for a key.  ``get_list`` returns all values.

    Defined with explicit dunder methods because Protocols cannot inherit
    from non-Protocol ABCs like ``Mapping``.
    """

    def __getitem__(self, key: str) -> str: ...
    def __contains__(self, key: object) -> bool: ...
    def __iter__(self) -> Iterator[str]: ...
    def __len__(self) -> int: ...
    def get(self, key: str, default: str | None = None) -> str | None: ...
    def get_list(self, key: str) -> list[str]: ...
    def has(self, key: str) -> bool: ...
    def read(self, key: str) -> str: ...


class MultiValueMap(Mapping[str, str]):
    """Immutable ``str -> str`` view over ``str -> list[str]`` storage.

    Indexing, ``get`` and ``read`` see the first value of a key;
    ``get_list`` sees all of them.  Subclasses override ``_normalize``
    to fold keys, e.g. lowercasing header names.
    """

    __slots__ = ("_data",)

    def __init__(self, data: dict[str, list[str]] | None = None) -> None:
        self._data: dict[str, list[str]] = data or {}

    def _normalize(self, key: str) -> str:
        return key

    def __getitem__(self, key: str) -> str:
        values = self._data.get(self._normalize(key))
        if not values:
            raise KeyError(key)
        return values[0]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self._normalize(key) in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"{type(self).__name__}({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        values = self._data.get(self._normalize(key))
        if values:
            return values[0]
        return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*, in the order they were sent."""
        return list(self._data.get(self._normalize(key), ()))

    def has(self, key: str) -> bool:
        """Whether *key* was sent, even with a blank value."""
        return key in self

    def read(self, key: str) -> str:
        """Return the first value for *key*. Raises ``KeyError`` if missing."""
        return self[key]
