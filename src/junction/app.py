"""Junction application class.

Mutable during setup (route registration, startup hooks).
Frozen when the first request or the ASGI lifespan startup arrives.
"""

from collections.abc import Callable

import anyio

from junction._internal.asgi import Receive, Scope, Send
from junction._internal.invoke import invoke
from junction._internal.types import Handler, Hook
from junction.config import AppConfig
from junction.routing.router import Router
from junction.server.handler import handle_request


class App:
    """The junction application.

    Routes can be registered at import time with the decorators or from
    an ``on_startup`` hook; either way the route table is compiled once,
    after every startup hook has run and before the first request is
    dispatched::

        app = App()

        @app.get("/api/v1/folders/:id:long")
        def show_folder(request: Request, output: Output) -> None:
            params = bind(request, FolderParams)
            output.write_json_body(load_folder(params.id))

        @app.on_startup
        def define_routes() -> None:
            app.post("/api/v1/folders")(create_folder)

    Thread safety:
        Setup is single-threaded.  Startup runs under an ``anyio.Lock``
        so concurrent first requests on one event loop start the app
        exactly once.  After that the router is read-only.
    """

    __slots__ = (
        "_router",
        "_shutdown_hooks",
        "_started",
        "_startup_hooks",
        "_startup_lock",
        "config",
    )

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self._router = Router()
        self._startup_hooks: list[Hook] = []
        self._shutdown_hooks: list[Hook] = []
        self._started = False
        self._startup_lock: anyio.Lock | None = None  # Created lazily on first startup

    @property
    def router(self) -> Router:
        return self._router

    # -- Route registration --

    def route(self, pattern: str, *, methods: list[str] | None = None) -> Callable[[Handler], Handler]:
        """Register a ``handler(request, output)`` via decorator.

        Args:
            pattern: Route pattern, e.g. ``/api/v1/shares/:id:ulong``.
            methods: Any of GET, POST, PUT, DELETE. Defaults to ``["GET"]``.
        """

        def decorator(func: Handler) -> Handler:
            for method in methods or ["GET"]:
                self._router.add(method, pattern, func)
            return func

        return decorator

    def get(self, pattern: str) -> Callable[[Handler], Handler]:
        return self.route(pattern, methods=["GET"])

    def post(self, pattern: str) -> Callable[[Handler], Handler]:
        return self.route(pattern, methods=["POST"])

    def put(self, pattern: str) -> Callable[[Handler], Handler]:
        return self.route(pattern, methods=["PUT"])

    def delete(self, pattern: str) -> Callable[[Handler], Handler]:
        return self.route(pattern, methods=["DELETE"])

    # -- Lifecycle hooks --

    def on_startup(self, func: Hook) -> Hook:
        """Register a sync or async startup hook via decorator.

        Hooks run in registration order before the route table is
        compiled, so they may register routes.
        """
        self._check_not_started()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Hook) -> Hook:
        """Register a sync or async shutdown hook via decorator."""
        self._check_not_started()
        self._shutdown_hooks.append(func)
        return func

    async def startup(self) -> None:
        """Run startup hooks and compile the route table. Idempotent."""
        if self._started:
            return
        # Lazy-init the lock inside the running event loop
        if self._startup_lock is None:
            self._startup_lock = anyio.Lock()
        async with self._startup_lock:
            if self._started:
                return
            for hook in self._startup_hooks:
                await invoke(hook)
            self._router.compile()
            self._started = True

    async def shutdown(self) -> None:
        for hook in self._shutdown_hooks:
            await invoke(hook)

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        await self.startup()
        await handle_request(scope, receive, send, router=self._router, config=self.config)

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self.startup()
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    def _check_not_started(self) -> None:
        if self._started:
            msg = "Cannot add hooks after the app has started serving requests."
            raise RuntimeError(msg)

    def __repr__(self) -> str:
        state = "started" if self._started else "setup"
        return f"<App {len(self._router.routes)} routes ({state})>"
