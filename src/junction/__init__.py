"""Junction — request routing and parameter binding for Python web handlers.

Maps a method and path to one handler through patterns with literal
segments, typed captures and a trailing wildcard, then binds path,
query, JSON and form values onto dataclasses.

Basic usage::

    from dataclasses import dataclass

    from junction import App, Output, Request, bind, param

    app = App()

    @dataclass(frozen=True, slots=True)
    class ShareParams:
        id: int = param(type="ulong", default=0)

    @app.get("/api/v1/shares/:id:ulong")
    def show_share(request: Request, output: Output) -> None:
        params = bind(request, ShareParams)
        output.write_json_body({"id": params.id})

Serve ``app`` with any ASGI server.
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "FieldSpec",
    "HTTPError",
    "JunctionError",
    "MethodNotAllowed",
    "NotFound",
    "Output",
    "ParamsParseError",
    "Request",
    "Response",
    "Router",
    "bind",
    "field_specs",
    "get_path_params",
    "get_request",
    "ignore",
    "match_path",
    "param",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import junction`` fast while providing a clean top-level API.
    """
    if name == "App":
        from junction.app import App

        return App

    if name == "AppConfig":
        from junction.config import AppConfig

        return AppConfig

    if name == "Request":
        from junction.http.request import Request

        return Request

    if name == "Output":
        from junction.http.output import Output

        return Output

    if name == "Response":
        from junction.http.response import Response

        return Response

    if name == "Router":
        from junction.routing.router import Router

        return Router

    if name == "match_path":
        from junction.routing.pattern import match_path

        return match_path

    if name in ("FieldSpec", "bind", "field_specs", "ignore", "param"):
        from junction import binding as _binding

        return getattr(_binding, name)

    if name in ("get_path_params", "get_request"):
        from junction import context as _ctx

        return getattr(_ctx, name)

    if name in (
        "ConfigurationError",
        "HTTPError",
        "JunctionError",
        "MethodNotAllowed",
        "NotFound",
        "ParamsParseError",
    ):
        from junction import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
