"""Middleware: plain async callables, no base class required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Built-in middleware:
    RequestIDMiddleware -- X-Request-ID propagation into ``g.request_id``
    StaticFiles -- Serve files from a directory under a URL prefix
    TimeoutMiddleware -- 504 once a request overruns its deadline
"""

from ron.middleware.protocol import Middleware, Next
from ron.middleware.request_id import RequestIDMiddleware
from ron.middleware.static import StaticFiles
from ron.middleware.timeout import TimeoutMiddleware

__all__ = [
    "Middleware",
    "Next",
    "RequestIDMiddleware",
    "StaticFiles",
    "TimeoutMiddleware",
]
