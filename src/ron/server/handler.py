"""ASGI request handler: the only place raw HTTP scopes meet ron types.

One request flows through::

    engine middleware (timeout first)
      -> group middleware (longest matching prefix)
        -> router match
          -> handler(ctx)

and whatever comes out, a ``Response`` or an exception, is sent back
through ASGI ``send``.
"""

from collections.abc import Callable, Sequence
from contextvars import Token
from typing import TYPE_CHECKING, Any

from ron._internal.asgi import Receive, Scope, Send
from ron._internal.invoke import invoke
from ron.context import Context, g, request_var
from ron.errors import HTTPError
from ron.http.request import Request
from ron.http.response import Response
from ron.http.writer import ResponseWriter
from ron.middleware.protocol import Next
from ron.routing.router import Router
from ron.server.errors import handle_http_error, handle_internal_error
from ron.server.sender import send_response

if TYPE_CHECKING:
    from ron.engine import Engine

type GroupChain = tuple[str, tuple[Callable[..., Any], ...]]


def group_for(path: str, groups: Sequence[GroupChain]) -> GroupChain | None:
    """The first group whose prefix covers *path*.

    *groups* must be ordered longest prefix first.
    """
    for prefix, middleware in groups:
        if prefix == "/" or path == prefix or path.startswith(prefix + "/"):
            return prefix, middleware
    return None


def wrap(middleware: Sequence[Callable[..., Any]], endpoint: Next) -> Next:
    """Nest *middleware* around *endpoint*; the first entry runs outermost."""
    handler = endpoint
    for mw in reversed(middleware):

        async def step(req: Request, _mw: Any = mw, _next: Next = handler) -> Response:
            return await _mw(req, _next)

        handler = step
    return handler


async def _read_body(request: Request, limit: int) -> bytes:
    declared = request.content_length
    if declared is not None and declared > limit:
        raise HTTPError(413, "Request body too large")
    body = await request.body()
    if len(body) > limit:
        raise HTTPError(413, "Request body too large")
    return body


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    engine: Engine,
    router: Router,
    middleware: tuple[Callable[..., Any], ...],
    groups: tuple[GroupChain, ...],
    error_handlers: dict[int | type, Callable[..., Any]],
    debug: bool,
    max_content_length: int,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    token: Token[Request] = request_var.set(request)

    async def endpoint(req: Request) -> Response:
        match = router.match(req.method, req.path)
        req = req.with_path_params(match.path_params)
        body = await _read_body(req, max_content_length)
        form = await req.form()

        writer = ResponseWriter()
        ctx = Context(req, engine, writer, body=body, form=form)
        result = await invoke(match.route.handler, ctx)
        if isinstance(result, Response):
            return result
        return writer.to_response()

    async def dispatch(req: Request) -> Response:
        group = group_for(req.path, groups)
        if group is None:
            return await endpoint(req)
        return await wrap(group[1], endpoint)(req)

    try:
        response = await wrap(middleware, dispatch)(request)
    except HTTPError as exc:
        response = await handle_http_error(exc, request, error_handlers, debug)
    except Exception as exc:
        response = await handle_internal_error(exc, request, error_handlers, debug)
    finally:
        g._reset()
        request_var.reset(token)

    await send_response(response, send, method=request.method)
