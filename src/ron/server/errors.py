"""Map exceptions raised during dispatch to responses.

``HTTPError`` subclasses go to a handler registered with
``@engine.error(status_or_type)`` or to a plain-text default. Anything
else is logged with its traceback and answered with 500.
"""

import inspect
import json
import logging
from collections.abc import Callable, Mapping
from typing import Any

from ron.errors import HTTPError
from ron.http.request import Request
from ron.http.response import CONTENT_JSON, CONTENT_TEXT, Response, error_response

logger = logging.getLogger("ron.server")


def _coerce(result: Any, status: int) -> Response:
    if isinstance(result, Response):
        return result
    if result is None:
        return Response(status=status)
    if isinstance(result, Mapping | list):
        return Response(body=json.dumps(result) + "\n", status=status, content_type=CONTENT_JSON)
    return Response(body=str(result), status=status, content_type=CONTENT_TEXT)


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
    status: int,
) -> Response:
    """Call *handler* with as many of ``(request, exc)`` as it accepts.

    Sync and async handlers are both supported. Return values other
    than ``Response`` are wrapped: mappings and lists as JSON, anything
    else as text, all with *status*.
    """
    params = list(inspect.signature(handler).parameters.values())
    if len(params) >= 2:
        result = handler(request, exc)
    elif len(params) == 1:
        result = handler(request)
    else:
        result = handler()
    if inspect.isawaitable(result):
        result = await result
    return _coerce(result, status)


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: dict[int | type, Callable[..., Any]],
    debug: bool,
) -> Response:
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    handler = error_handlers.get(type(exc)) or error_handlers.get(exc.status)
    if handler is not None:
        return await call_error_handler(handler, request, exc, exc.status)

    detail = exc.detail or f"Error {exc.status}"
    if debug and exc.detail:
        detail = f"{exc.status}: {exc.detail}"
    response = error_response(exc.status, detail)
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: dict[int | type, Callable[..., Any]],
    debug: bool,
) -> Response:
    logger.exception("500 %s %s", request.method, request.path)

    handler = error_handlers.get(type(exc)) or error_handlers.get(500)
    if handler is not None:
        return await call_error_handler(handler, request, exc, 500)

    if debug:
        return error_response(500, f"{type(exc).__name__}: {exc}")
    return error_response(500, "Internal Server Error")
