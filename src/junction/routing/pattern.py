"""Route patterns and the segment-walking matcher.

Pattern syntax, one segment per ``/``-separated part::

    /api/v1/folders             literal segments only (a static route)
    /api/v1/shares/:id          untyped capture, any segment text
    /api/v1/shares/:id:ulong    typed capture, must parse as ulong
    /files/*path                named wildcard, captures the rest of the path
    /assets/*                   anonymous wildcard, matches and captures nothing

Captured values are always stored as the raw segment text.  A typed
capture only validates; conversion happens later in ``bind()``.
"""

from dataclasses import dataclass
from functools import lru_cache

from junction.errors import ConfigurationError
from junction.routing.params import CONVERTERS, is_valid


@dataclass(frozen=True, slots=True)
class Literal:
    """A segment that must equal the path segment exactly."""

    text: str


@dataclass(frozen=True, slots=True)
class Capture:
    """``:name`` or ``:name:type`` — captures one path segment."""

    name: str
    type_name: str | None = None


@dataclass(frozen=True, slots=True)
class Wildcard:
    """``*`` or ``*name`` — matches the remainder of the path. Always last."""

    name: str | None = None


Segment = Literal | Capture | Wildcard


def split_path(path: str) -> list[str]:
    """Split on ``/`` after trimming the surrounding slashes.

    ``"/"`` and ``""`` have no segments; interior empty segments are kept
    (``"/a//b"`` -> ``["a", "", "b"]``).
    """
    trimmed = path.strip("/")
    if not trimmed:
        return []
    return trimmed.split("/")


def _parse_segment(part: str, pattern: str) -> Segment:
    if part.startswith(":"):
        name, *types = part[1:].split(":")
        if not name:
            msg = f"Route pattern {pattern!r} has a capture without a name: {part!r}"
            raise ConfigurationError(msg)
        if not types:
            return Capture(name)
        if len(types) > 1:
            msg = (
                f"Route pattern {pattern!r} has more than one type in {part!r}. "
                "Use ':name' or ':name:type'."
            )
            raise ConfigurationError(msg)
        type_name = types[0]
        if type_name not in CONVERTERS:
            known = ", ".join(sorted(CONVERTERS))
            msg = (
                f"Route pattern {pattern!r} uses unknown capture type {type_name!r}. "
                f"Known types: {known}"
            )
            raise ConfigurationError(msg)
        return Capture(name, type_name)

    if part.startswith("*"):
        return Wildcard(part[1:] or None)

    return Literal(part)


@dataclass(frozen=True, slots=True)
class RoutePattern:
    """A parsed, immutable route pattern."""

    source: str
    segments: tuple[Segment, ...]

    @property
    def is_static(self) -> bool:
        """True when the pattern has no ``:`` and no ``*``.

        Static patterns are dispatched by exact string lookup and never
        reach ``match()`` through the router.
        """
        return ":" not in self.source and "*" not in self.source

    @property
    def has_wildcard(self) -> bool:
        return bool(self.segments) and isinstance(self.segments[-1], Wildcard)

    def match(self, path: str) -> dict[str, str] | None:
        """Match *path* against this pattern.

        Returns the captured params (possibly empty) on success, or
        ``None`` when the path does not match.  A typed capture whose
        segment does not parse is a miss, not an error, so two routes can
        share a position and be told apart by type.
        """
        parts = split_path(path)
        if len(parts) != len(self.segments) and not self.has_wildcard:
            return None

        params: dict[str, str] = {}
        for index, segment in enumerate(self.segments):
            if isinstance(segment, Wildcard):
                if segment.name is not None:
                    rest = "/".join(parts[index:])
                    if not rest:
                        return None
                    params[segment.name] = rest
                break

            if index >= len(parts):
                return None
            part = parts[index]

            if isinstance(segment, Capture):
                if segment.type_name is not None and not is_valid(part, segment.type_name):
                    return None
                params[segment.name] = part
            elif segment.text != part:
                return None

        return params


def parse_pattern(pattern: str) -> RoutePattern:
    """Parse and validate a route pattern.

    Raises ``ConfigurationError`` for captures without a name, empty or
    unknown type suffixes, wildcards anywhere but the last segment, and
    names captured more than once.
    """
    segments = tuple(_parse_segment(part, pattern) for part in split_path(pattern))

    for segment in segments[:-1]:
        if isinstance(segment, Wildcard):
            msg = f"Route pattern {pattern!r} has a wildcard before its last segment."
            raise ConfigurationError(msg)

    seen: set[str] = set()
    for segment in segments:
        name = segment.name if isinstance(segment, Capture | Wildcard) else None
        if name is None:
            continue
        if name in seen:
            msg = f"Route pattern {pattern!r} captures {name!r} more than once."
            raise ConfigurationError(msg)
        seen.add(name)

    return RoutePattern(source=pattern, segments=segments)


@lru_cache(maxsize=1024)
def _cached_pattern(pattern: str) -> RoutePattern:
    return parse_pattern(pattern)


def match_path(pattern: str, path: str) -> dict[str, str] | None:
    """Match a raw *pattern* string against *path*.

    Examples::

        >>> match_path("/api/v1/shares/:id:ulong", "/api/v1/shares/42")
        {'id': '42'}
        >>> match_path("/api/v1/shares/:id:ulong", "/api/v1/shares/abc") is None
        True
        >>> match_path("/files/*path", "/files/a/b/c")
        {'path': 'a/b/c'}
    """
    return _cached_pattern(pattern).match(path)
