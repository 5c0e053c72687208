"""Middleware protocol and the Next alias.

A middleware is any callable shaped like::

    async def mw(request: Request, next: Next) -> Response: ...

Functions and callable objects both qualify; nothing needs to subclass
anything.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from ron.http.request import Request
from ron.http.response import Response

# The rest of the chain, as seen from inside one middleware
type Next = Callable[[Request], Awaitable[Response]]


class Middleware(Protocol):
    """Protocol for ron middleware.

    ::

        async def timing(request: Request, next: Next) -> Response:
            start = time.monotonic()
            response = await next(request)
            return response.with_header("X-Time", f"{time.monotonic() - start:.3f}")
    """

    async def __call__(self, request: Request, next: Next) -> Response: ...
