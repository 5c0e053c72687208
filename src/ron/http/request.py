"""Immutable HTTP request.

Frozen metadata with async body access. Path values captured by the
router are attached with ``with_path_params`` once a route matches.
"""

from __future__ import annotations

import json as json_module
from collections.abc import AsyncGenerator
from dataclasses import dataclass, field, replace
from typing import Any

from ron._internal.asgi import Receive
from ron.http.values import Headers, Values


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Metadata (method, path, headers, query) is frozen at creation.
    The body is read once through ASGI ``receive`` and cached.
    """

    method: str
    path: str
    headers: Headers
    query: Values
    path_params: dict[str, str]
    http_version: str
    client: tuple[str, int] | None

    _receive: Receive

    # Mutable cache for the body and parsed form (the dict itself, not the field)
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def content_length(self) -> int | None:
        value = self.headers.get("content-length")
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None

    @property
    def url(self) -> str:
        """Path plus query string."""
        if self.query.encoded:
            return f"{self.path}?{self.query.encoded}"
        return self.path

    def with_path_params(self, params: dict[str, str]) -> Request:
        """Return a copy carrying the router's captured path values.

        Shares the body cache so a body read by middleware is not lost.
        """
        return replace(self, path_params=params)

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body (cached after the first call)."""
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks = [chunk async for chunk in self.stream()]
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks."""
        while True:
            message = await self._receive()
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def json(self) -> Any:
        """Parse the body as JSON."""
        return json_module.loads(await self.body())

    async def text(self) -> str:
        return (await self.body()).decode("utf-8")

    async def form(self) -> Values:
        """Parse a URL-encoded body merged with the query string.

        Body values come first, so ``form()["x"]`` prefers the posted
        value over ``?x=`` in the URL. Bodies with another content type
        contribute nothing.
        """
        if "_form" in self._cache:
            return self._cache["_form"]

        posted = Values()
        ct = (self.content_type or "").split(";", 1)[0].strip().lower()
        if self.method in ("POST", "PUT", "PATCH") and ct == "application/x-www-form-urlencoded":
            posted = Values((await self.body()).decode("utf-8"))

        result = Values.merged(posted, self.query)
        self._cache["_form"] = result
        return result

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: dict[str, Any], receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=Headers(tuple(scope.get("headers", ()))),
            query=Values(scope.get("query_string", b"")),
            path_params={},
            http_version=scope.get("http_version", "1.1"),
            client=tuple(client) if client else None,
            _receive=receive,
        )
