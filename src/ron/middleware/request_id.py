"""Request ID propagation."""

import time

from ron.context import g
from ron.http.request import Request
from ron.http.response import Response
from ron.middleware.protocol import Next

HEADER = "X-Request-ID"


class RequestIDMiddleware:
    """Tag every request with an identifier.

    An incoming ``X-Request-ID`` header is reused; otherwise the
    current time in nanoseconds is used. The value is available to
    handlers as ``g.request_id`` and is echoed on the response.
    """

    __slots__ = ("header",)

    def __init__(self, header: str = HEADER) -> None:
        self.header = header

    async def __call__(self, request: Request, next: Next) -> Response:
        request_id = request.headers.get(self.header) or str(time.time_ns())
        g.request_id = request_id
        response = await next(request)
        if response.header(self.header) is None:
            response = response.with_header(self.header, request_id)
        return response
