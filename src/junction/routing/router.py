"""Route table with per-method static lookup and ordered dynamic patterns.

Routes are registered during setup and the table is frozen with
``compile()`` before the first request.  After that it is only read, so
concurrent requests share it without locking.

Dispatch order for a method:

1. Exact lookup of the request path among static patterns (no ``:`` or
   ``*``).  A static route always beats a dynamic one.
2. Dynamic patterns in registration order.  The first that matches wins;
   there is no specificity scoring.  Register the more specific pattern
   first, e.g. ``/shares/:id:ulong`` before ``/shares/:name``.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field, replace

from junction._internal.invoke import invoke
from junction._internal.types import Handler
from junction.context import request_scope
from junction.errors import ConfigurationError
from junction.http.output import Output
from junction.http.request import Request
from junction.routing.pattern import RoutePattern, parse_pattern

logger = logging.getLogger("junction.routing")

METHODS: frozenset[str] = frozenset({"GET", "POST", "PUT", "DELETE"})


@dataclass(frozen=True, slots=True)
class RouteEntry:
    """A registered route."""

    method: str
    pattern: RoutePattern
    handler: Handler


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    entry: RouteEntry
    path_params: dict[str, str]

    @property
    def handler(self) -> Handler:
        return self.entry.handler


@dataclass(slots=True)
class _MethodTable:
    """Routes for one HTTP method. Mutable until the router compiles."""

    static: dict[str, RouteEntry] = field(default_factory=dict)
    dynamic: list[RouteEntry] = field(default_factory=list)


class Router:
    """Per-method route table.

    Usage::

        router = Router()
        router.get("/api/v1/folders", list_folders)
        router.get("/api/v1/folders/:id:long", show_folder)
        router.compile()
        handled = router.dispatch(request, output)
    """

    __slots__ = ("_compiled", "_tables")

    def __init__(self) -> None:
        self._tables: dict[str, _MethodTable] = {method: _MethodTable() for method in METHODS}
        self._compiled = False

    # -- Registration --

    def add(self, method: str, pattern: str, handler: Handler) -> RouteEntry:
        """Register *handler* for *method* and *pattern*.

        Static patterns overwrite an earlier registration of the same
        path.  Dynamic patterns are appended, so earlier ones take
        priority.

        Raises:
            RuntimeError: If the router is already compiled.
            ConfigurationError: For an unsupported method or invalid pattern.
        """
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        method = method.upper()
        table = self._tables.get(method)
        if table is None:
            allowed = ", ".join(sorted(METHODS))
            msg = f"Cannot register {method} {pattern!r}: only {allowed} are routed."
            raise ConfigurationError(msg)

        entry = RouteEntry(method, parse_pattern(pattern), handler)
        if entry.pattern.is_static:
            table.static[pattern] = entry
        else:
            table.dynamic.append(entry)

        logger.debug(
            "Registered %s %s (%s)",
            method,
            pattern,
            "static" if entry.pattern.is_static else "dynamic",
        )
        return entry

    def get(self, pattern: str, handler: Handler) -> RouteEntry:
        return self.add("GET", pattern, handler)

    def post(self, pattern: str, handler: Handler) -> RouteEntry:
        return self.add("POST", pattern, handler)

    def put(self, pattern: str, handler: Handler) -> RouteEntry:
        return self.add("PUT", pattern, handler)

    def delete(self, pattern: str, handler: Handler) -> RouteEntry:
        return self.add("DELETE", pattern, handler)

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    @property
    def compiled(self) -> bool:
        return self._compiled

    @property
    def routes(self) -> list[RouteEntry]:
        """Every registered route, static before dynamic within each method."""
        result: list[RouteEntry] = []
        for method in sorted(self._tables):
            table = self._tables[method]
            result.extend(table.static.values())
            result.extend(table.dynamic)
        return result

    # -- Lookup --

    def match(self, method: str, path: str) -> RouteMatch | None:
        """Find the route for *method* and *path*.

        Returns ``None`` when nothing matches or the method is not one the
        router handles.
        """
        table = self._tables.get(method.upper())
        if table is None:
            return None

        entry = table.static.get(path)
        if entry is not None:
            return RouteMatch(entry, {})

        for entry in table.dynamic:
            params = entry.pattern.match(path)
            if params is not None:
                return RouteMatch(entry, params)

        return None

    # -- Dispatch --

    def _resolve(self, request: Request) -> tuple[RouteMatch, Request] | None:
        match = self.match(request.method, request.path)
        if match is None:
            logger.debug("No route for %s %s", request.method, request.path)
            return None
        return match, replace(request, path_params=match.path_params)

    def dispatch(self, request: Request, output: Output) -> bool:
        """Invoke the matching handler with ``(request, output)``.

        The handler sees a copy of *request* whose ``path_params`` holds
        the captures, and ``junction.context`` publishes the same values
        until it returns.  Returns ``False`` without writing anything when
        no route matches.

        Raises ``TypeError`` for an ``async def`` handler; use
        ``dispatch_async`` for those.
        """
        resolved = self._resolve(request)
        if resolved is None:
            return False
        match, routed = resolved

        with request_scope(routed):
            result = match.handler(routed, output)
            if inspect.isawaitable(result):
                if inspect.iscoroutine(result):
                    result.close()
                msg = (
                    f"Handler for {match.entry.method} {match.entry.pattern.source!r} "
                    "is async; use dispatch_async()."
                )
                raise TypeError(msg)
        return True

    async def dispatch_async(self, request: Request, output: Output) -> bool:
        """Like ``dispatch`` but awaits async handlers. Sync handlers work too."""
        resolved = self._resolve(request)
        if resolved is None:
            return False
        match, routed = resolved

        with request_scope(routed):
            await invoke(match.handler, routed, output)
        return True
