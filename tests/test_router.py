"""Tests for junction.routing.router — registration, lookup, and dispatch."""

import pytest

from junction.context import get_path_params, get_request
from junction.errors import ConfigurationError
from junction.http.output import Output
from junction.http.request import Request
from junction.routing.router import Router


def _named(name: str):
    def handler(request: Request, output: Output) -> None:
        output.write(name)

    handler.__name__ = name
    return handler


def _dispatch(router: Router, method: str, path: str) -> tuple[bool, Output]:
    output = Output()
    handled = router.dispatch(Request.build(method, path), output)
    return handled, output


class TestRegistration:
    def test_static_and_dynamic_tables(self) -> None:
        router = Router()
        router.get("/api/v1/folders", _named("list"))
        router.get("/api/v1/folders/:id:long", _named("show"))
        sources = [entry.pattern.source for entry in router.routes]
        assert sources == ["/api/v1/folders", "/api/v1/folders/:id:long"]

    def test_method_is_case_insensitive(self) -> None:
        router = Router()
        entry = router.add("post", "/notes", _named("create"))
        assert entry.method == "POST"

    def test_unsupported_method_raises(self) -> None:
        router = Router()
        with pytest.raises(ConfigurationError, match="PATCH"):
            router.add("PATCH", "/notes", _named("patch"))

    def test_invalid_pattern_raises(self) -> None:
        router = Router()
        with pytest.raises(ConfigurationError):
            router.get("/notes/:id:uuid", _named("show"))

    def test_add_after_compile_raises(self) -> None:
        router = Router()
        router.compile()
        assert router.compiled is True
        with pytest.raises(RuntimeError, match="after compilation"):
            router.get("/late", _named("late"))


class TestMatch:
    def test_static_exact(self) -> None:
        router = Router()
        handler = _named("list")
        router.get("/api/v1/folders", handler)
        match = router.match("GET", "/api/v1/folders")
        assert match is not None
        assert match.handler is handler
        assert match.path_params == {}

    def test_static_beats_dynamic(self) -> None:
        router = Router()
        router.get("/shares/:name", _named("dynamic"))
        router.get("/shares/latest", _named("static"))
        handled, output = _dispatch(router, "GET", "/shares/latest")
        assert handled is True
        assert output.body == b"static"

    def test_first_dynamic_wins(self) -> None:
        router = Router()
        router.get("/shares/:id:ulong", _named("by_id"))
        router.get("/shares/:name", _named("by_name"))

        _, output = _dispatch(router, "GET", "/shares/42")
        assert output.body == b"by_id"

        _, output = _dispatch(router, "GET", "/shares/abc")
        assert output.body == b"by_name"

    def test_overlong_typed_capture_falls_through(self) -> None:
        router = Router()
        router.get("/shares/:id:ulong", _named("by_id"))
        router.get("/shares/:name", _named("by_name"))
        _, output = _dispatch(router, "GET", "/shares/" + "1" * 5000)
        assert output.body == b"by_name"

    def test_registration_order_not_specificity(self) -> None:
        router = Router()
        router.get("/shares/:name", _named("by_name"))
        router.get("/shares/:id:ulong", _named("by_id"))
        _, output = _dispatch(router, "GET", "/shares/42")
        assert output.body == b"by_name"

    def test_static_reregistration_overwrites(self) -> None:
        router = Router()
        router.get("/ping", _named("first"))
        router.get("/ping", _named("second"))
        _, output = _dispatch(router, "GET", "/ping")
        assert output.body == b"second"
        assert len(router.routes) == 1

    def test_dynamic_reregistration_keeps_first(self) -> None:
        router = Router()
        router.get("/notes/:id", _named("first"))
        router.get("/notes/:id", _named("second"))
        _, output = _dispatch(router, "GET", "/notes/1")
        assert output.body == b"first"

    def test_methods_are_separate(self) -> None:
        router = Router()
        router.get("/notes", _named("list"))
        router.post("/notes", _named("create"))
        router.put("/notes/:id", _named("update"))
        router.delete("/notes/:id", _named("remove"))

        assert _dispatch(router, "POST", "/notes")[1].body == b"create"
        assert _dispatch(router, "PUT", "/notes/3")[1].body == b"update"
        assert _dispatch(router, "DELETE", "/notes/3")[1].body == b"remove"
        assert router.match("DELETE", "/notes") is None

    def test_static_lookup_is_exact(self) -> None:
        router = Router()
        router.get("/api/v1/folders", _named("list"))
        assert router.match("GET", "/api/v1/folders/") is None

    def test_unknown_method_is_miss(self) -> None:
        router = Router()
        router.get("/notes", _named("list"))
        assert router.match("PATCH", "/notes") is None

    def test_wildcard_route(self) -> None:
        router = Router()
        router.get("/files/*path", _named("files"))
        match = router.match("GET", "/files/a/b/c")
        assert match is not None
        assert match.path_params == {"path": "a/b/c"}
        assert router.match("GET", "/files/") is None


class TestDispatch:
    def test_no_match_writes_nothing(self) -> None:
        router = Router()
        router.get("/notes", _named("list"))
        handled, output = _dispatch(router, "GET", "/folders")
        assert handled is False
        assert output.body == b""
        assert output.status == 200

    def test_handler_sees_path_params(self) -> None:
        router = Router()
        seen: dict[str, object] = {}

        def show(request: Request, output: Output) -> None:
            seen["request"] = request.path_params
            seen["context"] = get_path_params()
            seen["current"] = get_request()

        router.get("/api/v1/shares/:id:ulong", show)
        original = Request.build("GET", "/api/v1/shares/42")
        assert router.dispatch(original, Output()) is True

        assert seen["request"] == {"id": "42"}
        assert seen["context"] == {"id": "42"}
        assert seen["current"].path_params == {"id": "42"}
        # The caller's request is untouched
        assert original.path_params == {}

    def test_context_reset_after_dispatch(self) -> None:
        router = Router()
        router.get("/notes/:id", _named("show"))
        _dispatch(router, "GET", "/notes/9")
        assert get_path_params() == {}
        with pytest.raises(LookupError):
            get_request()

    def test_context_reset_when_handler_raises(self) -> None:
        router = Router()

        def broken(request: Request, output: Output) -> None:
            raise RuntimeError("boom")

        router.get("/notes/:id", broken)
        with pytest.raises(RuntimeError, match="boom"):
            _dispatch(router, "GET", "/notes/9")
        assert get_path_params() == {}

    def test_sync_dispatch_rejects_async_handler(self) -> None:
        router = Router()

        async def show(request: Request, output: Output) -> None:
            output.write("never")

        router.get("/notes", show)
        with pytest.raises(TypeError, match="dispatch_async"):
            _dispatch(router, "GET", "/notes")

    async def test_dispatch_async_awaits_handler(self) -> None:
        router = Router()

        async def show(request: Request, output: Output) -> None:
            output.write_json_body({"id": get_path_params()["id"]})

        router.get("/notes/:id:long", show)
        output = Output()
        handled = await router.dispatch_async(Request.build("GET", "/notes/5"), output)
        assert handled is True
        assert output.body == b'{"id": "5"}'

    async def test_dispatch_async_runs_sync_handler(self) -> None:
        router = Router()
        router.get("/ping", _named("pong"))
        output = Output()
        assert await router.dispatch_async(Request.build("GET", "/ping"), output) is True
        assert output.body == b"pong"

    async def test_dispatch_async_miss(self) -> None:
        router = Router()
        output = Output()
        assert await router.dispatch_async(Request.build("GET", "/ping"), output) is False
