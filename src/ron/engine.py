"""The ron engine: route registration, groups, middleware and ASGI entry.

Mutable during setup. Frozen on the first ASGI call (or ``run()``),
after which routes and middleware can no longer change.
"""

import inspect
import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ron._internal.asgi import Receive, Scope, Send
from ron._internal.log import configure_logging
from ron._internal.types import ErrorHandler, Handler
from ron.config import EngineConfig
from ron.middleware.protocol import Middleware
from ron.middleware.static import StaticFiles
from ron.middleware.timeout import TimeoutMiddleware
from ron.routing.route import Route
from ron.routing.router import Router
from ron.server.handler import GroupChain, handle_request
from ron.templating.renderer import Render

logger = logging.getLogger("ron.engine")


@dataclass(slots=True)
class _PendingRoute:
    """A route waiting to be compiled."""

    path: str
    handler: Handler
    methods: frozenset[str]
    name: str | None


def _normalize_prefix(prefix: str) -> str:
    return "/" + prefix.strip("/")


def join_path(prefix: str, path: str) -> str:
    """``join_path("/api", "/users")`` -> ``"/api/users"``; ``"/"`` stays the prefix."""
    tail = path.strip("/")
    base = prefix.rstrip("/")
    if not tail:
        return base or "/"
    return f"{base}/{tail}"


class _Registrar:
    """Route decorators shared by ``Engine`` and ``RouteGroup``.

    Each verb works as a decorator or as a direct call::

        @engine.get("/")
        def index(ctx): ...

        engine.post("/users", create_user)
    """

    __slots__ = ()

    def _add(self, path: str, handler: Handler, methods: frozenset[str], name: str | None) -> None:
        raise NotImplementedError

    def route(
        self,
        path: str,
        handler: Handler | None = None,
        *,
        methods: Iterable[str] = ("GET",),
        name: str | None = None,
    ) -> Any:
        """Register *handler* for *path* and *methods*."""
        verbs = frozenset(m.upper() for m in methods)

        def decorator(func: Handler) -> Handler:
            self._add(path, func, verbs, name)
            return func

        if handler is not None:
            return decorator(handler)
        return decorator

    def get(self, path: str, handler: Handler | None = None, *, name: str | None = None) -> Any:
        return self.route(path, handler, methods=("GET",), name=name)

    def post(self, path: str, handler: Handler | None = None, *, name: str | None = None) -> Any:
        return self.route(path, handler, methods=("POST",), name=name)

    def put(self, path: str, handler: Handler | None = None, *, name: str | None = None) -> Any:
        return self.route(path, handler, methods=("PUT",), name=name)

    def patch(self, path: str, handler: Handler | None = None, *, name: str | None = None) -> Any:
        return self.route(path, handler, methods=("PATCH",), name=name)

    def delete(self, path: str, handler: Handler | None = None, *, name: str | None = None) -> Any:
        return self.route(path, handler, methods=("DELETE",), name=name)


class RouteGroup(_Registrar):
    """Routes sharing a URL prefix and their own middleware.

    Group middleware wraps every request whose path is the prefix or
    lies under it, after the engine's middleware. When prefixes nest,
    only the longest matching group applies.
    """

    __slots__ = ("_engine", "middleware", "prefix")

    def __init__(self, engine: Engine, prefix: str) -> None:
        self._engine = engine
        self.prefix = prefix
        self.middleware: list[Middleware] = []

    def use(self, *middleware: Middleware) -> RouteGroup:
        self._engine._check_not_frozen()
        self.middleware.extend(middleware)
        return self

    def _add(self, path: str, handler: Handler, methods: frozenset[str], name: str | None) -> None:
        self._engine._add(join_path(self.prefix, path), handler, methods, name)

    def __repr__(self) -> str:
        return f"<RouteGroup {self.prefix!r} middleware={len(self.middleware)}>"


class Engine(_Registrar):
    """The ron application.

    Usage::

        engine = Engine(EngineConfig(port=3000))

        @engine.get("/")
        def index(ctx: Context) -> None:
            ctx.html(200, "page.index.html")

        engine.run()

    The freeze transition runs under a lock with a double check, so
    exactly one caller compiles the router even when several workers
    hit the first request at once.
    """

    __slots__ = (
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_group_chains",
        "_groups",
        "_middleware",
        "_middleware_list",
        "_pending_routes",
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
        "render",
    )

    def __init__(self, config: EngineConfig | None = None, *, render: Render | None = None) -> None:
        self.config: EngineConfig = config or EngineConfig()
        if render is None and self.config.templates_path is not None:
            render = Render(
                self.config.templates_path,
                enable_cache=self.config.enable_cache,
                extension=self.config.template_extension,
                autoescape=self.config.autoescape,
            )
        self.render: Render | None = render

        self._pending_routes: list[_PendingRoute] = []
        self._middleware_list: list[Middleware] = []
        self._groups: dict[str, RouteGroup] = {}
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen = False
        self._freeze_lock = threading.Lock()

        # Compiled state, set by _freeze()
        self._router: Router | None = None
        self._middleware: tuple[Middleware, ...] = ()
        self._group_chains: tuple[GroupChain, ...] = ()

    # -- Setup --

    def _add(self, path: str, handler: Handler, methods: frozenset[str], name: str | None) -> None:
        self._check_not_frozen()
        self._pending_routes.append(_PendingRoute(path, handler, methods, name))

    def use(self, *middleware: Middleware) -> Engine:
        """Append engine-level middleware. The first registered runs outermost."""
        self._check_not_frozen()
        self._middleware_list.extend(middleware)
        return self

    def group(self, prefix: str) -> RouteGroup:
        """Return the group for *prefix*, creating it on first use."""
        self._check_not_frozen()
        prefix = _normalize_prefix(prefix)
        group = self._groups.get(prefix)
        if group is None:
            group = self._groups[prefix] = RouteGroup(self, prefix)
        return group

    def static(self, path: str, directory: str | Path) -> StaticFiles:
        """Serve files from *directory* under the URL prefix *path*.

        Raises ``ConfigurationError`` (after logging it) when
        *directory* does not exist.
        """
        self._check_not_frozen()
        files = StaticFiles(directory, prefix=path)
        self._middleware_list.append(files)
        logger.debug("static %s -> %s", files.prefix, files.directory)
        return files

    def error(self, code_or_exception: int | type[Exception]) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler for a status code or exception type."""

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a hook run during ASGI lifespan startup."""
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a hook run during ASGI lifespan shutdown."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    @property
    def routes(self) -> list[Route]:
        """Compiled routes (freezes the engine)."""
        self._ensure_frozen()
        assert self._router is not None
        return self._router.routes

    # -- Serving --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Configure logging, compile the engine and serve it with pounce."""
        configure_logging(self.config.log_level, self.config.log_dir)
        self._ensure_frozen()

        from ron.server.runner import run_server

        _host = host or self.config.host
        _port = port or self.config.port
        logger.info("ron listening on http://%s:%d", _host, _port)
        run_server(self, _host, _port)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()
        assert self._router is not None

        await handle_request(
            scope,
            receive,
            send,
            engine=self,
            router=self._router,
            middleware=self._middleware,
            groups=self._group_chains,
            error_handlers=self._error_handlers,
            debug=self.config.debug,
            max_content_length=self.config.max_content_length,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        self._ensure_frozen()

        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                try:
                    for hook in self._startup_hooks:
                        result = hook()
                        if inspect.isawaitable(result):
                            await result
                except Exception as exc:
                    logger.exception("startup hook failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif message["type"] == "lifespan.shutdown":
                for hook in self._shutdown_hooks:
                    result = hook()
                    if inspect.isawaitable(result):
                        await result
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile routes and middleware. Caller holds ``_freeze_lock``."""
        router = Router()
        for pending in self._pending_routes:
            router.add(Route(pending.path, pending.handler, pending.methods, pending.name))
        router.compile()
        self._router = router

        if self.config.static_dir is not None:
            static = StaticFiles(self.config.static_dir, prefix=self.config.static_url)
            self._middleware_list.append(static)

        chain: list[Middleware] = []
        if self.config.timeout is not None:
            chain.append(TimeoutMiddleware(self.config.timeout))
        chain.extend(self._middleware_list)
        self._middleware = tuple(chain)

        ordered = sorted(self._groups.values(), key=lambda grp: len(grp.prefix), reverse=True)
        self._group_chains = tuple(
            (grp.prefix, tuple(grp.middleware)) for grp in ordered if grp.middleware
        )

        self._frozen = True
        logger.debug(
            "engine frozen: %d routes, %d middleware, %d groups",
            len(router.routes),
            len(self._middleware),
            len(self._groups),
        )

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the engine after it has started serving requests. "
                "Register routes and middleware before calling engine.run()."
            )
            raise RuntimeError(msg)
