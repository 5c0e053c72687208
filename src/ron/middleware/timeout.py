"""Per-request deadline."""

import logging

import anyio

from ron.http.request import Request
from ron.http.response import Response, error_response
from ron.middleware.protocol import Next

logger = logging.getLogger("ron.server")


class TimeoutMiddleware:
    """Answer 504 when the rest of the chain overruns *seconds*.

    The chain runs inside an anyio cancel scope. When the deadline
    passes, the pending ``await`` is cancelled and the client receives
    ``504 Request timed out``. A synchronous handler that never yields
    cannot be interrupted; its late result is discarded.
    """

    __slots__ = ("seconds",)

    def __init__(self, seconds: float = 30.0) -> None:
        if seconds <= 0:
            msg = f"timeout must be positive, got {seconds!r}"
            raise ValueError(msg)
        self.seconds = seconds

    async def __call__(self, request: Request, next: Next) -> Response:
        response: Response | None = None
        with anyio.move_on_after(self.seconds) as scope:
            response = await next(request)
        overran = anyio.current_time() >= scope.deadline
        if scope.cancelled_caught or response is None or overran:
            logger.warning(
                "%s %s timed out after %.3fs", request.method, request.path, self.seconds
            )
            return error_response(504, "Request timed out")
        return response
