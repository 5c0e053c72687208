"""Per-request handler context.

Every route handler receives a ``Context``::

    @engine.get("/users/{id:int}")
    def show(ctx: Context) -> None:
        ctx.html(200, "page.user.html", TemplateData({"id": ctx.path_value("id")}))

The module also provides request-scoped globals backed by
``ContextVar``:

- ``request_var`` / ``get_request()``: the request being handled.
- ``g``: a mutable namespace, reset after each request.

Both are task-local under asyncio, so concurrent requests never see
each other's values.
"""

import json
import logging
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

from ron.binding import bind_form, bind_json
from ron.errors import ConfigurationError, HTTPError, InvalidPageSize
from ron.http.request import Request
from ron.http.response import CONTENT_HTML, CONTENT_JSON, CONTENT_TEXT
from ron.http.values import Values
from ron.http.writer import ResponseWriter
from ron.pagination import Pages
from ron.templating.renderer import TemplateData

if TYPE_CHECKING:
    from ron.engine import Engine

logger = logging.getLogger("ron.server")

# -- Request-scoped state --

request_var: ContextVar[Request] = ContextVar("ron_request")
"""The current request. Set by the ASGI handler before dispatch."""


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` outside a request.
    """
    return request_var.get()


class _RequestGlobals:
    """Attribute namespace scoped to the current request.

    ::

        from ron.context import g

        g.user = current_user   # in middleware
        g.user.name             # in a handler
    """

    __slots__ = ("_store",)

    def __init__(self) -> None:
        object.__setattr__(self, "_store", ContextVar("ron_g", default=None))

    def _dict(self) -> dict[str, Any]:
        store: ContextVar[dict[str, Any] | None] = object.__getattribute__(self, "_store")
        values = store.get()
        if values is None:
            values = {}
            store.set(values)
        return values

    def _reset(self) -> None:
        object.__getattribute__(self, "_store").set(None)

    def __getattr__(self, name: str) -> Any:
        try:
            return self._dict()[name]
        except KeyError:
            msg = f"'g' has no attribute {name!r} in the current request scope"
            raise AttributeError(msg) from None

    def __setattr__(self, name: str, value: Any) -> None:
        self._dict()[name] = value

    def __delattr__(self, name: str) -> None:
        try:
            del self._dict()[name]
        except KeyError:
            msg = f"'g' has no attribute {name!r} in the current request scope"
            raise AttributeError(msg) from None

    def __contains__(self, name: str) -> bool:
        return name in self._dict()

    def get(self, name: str, default: Any = None) -> Any:
        return self._dict().get(name, default)

    def __repr__(self) -> str:
        return f"<g {self._dict()!r}>"


g = _RequestGlobals()
"""Request-scoped namespace."""


# -- Handler context --


class _StatusSink:
    """Writes the status line on the first chunk, then forwards bytes."""

    __slots__ = ("_status", "_writer")

    def __init__(self, writer: ResponseWriter, status: int) -> None:
        self._writer = writer
        self._status = status

    def write(self, data: bytes) -> int:
        self._writer.write_header(self._status)
        return self._writer.write(data)


class Context:
    """Request, response writer and engine bundled for one handler call.

    The request body is read before the handler runs, so form and JSON
    access is synchronous and works from plain ``def`` handlers.
    """

    __slots__ = ("_body", "_form", "engine", "request", "writer")

    def __init__(
        self,
        request: Request,
        engine: Engine,
        writer: ResponseWriter,
        *,
        body: bytes = b"",
        form: Values | None = None,
    ) -> None:
        self.request = request
        self.engine = engine
        self.writer = writer
        self._body = body
        self._form = form if form is not None else request.query

    # -- Request access --

    @property
    def query(self) -> Values:
        return self.request.query

    @property
    def body(self) -> bytes:
        return self._body

    def path_value(self, name: str) -> str:
        """A value captured by the route pattern, or ``""``."""
        return self.request.path_params.get(name, "")

    def form_value(self, name: str) -> str:
        """First posted value for *name*, falling back to the query string."""
        return self._form.get(name, "")

    def header(self, name: str) -> str | None:
        return self.request.headers.get(name)

    def bind_json[T](self, cls: type[T]) -> T:
        return bind_json(cls, self._body, self.request.content_type)

    def bind_form[T](self, cls: type[T]) -> T:
        return bind_form(cls, self._form)

    def paginate(self, pages: Pages) -> Pages:
        """Apply ``limit`` / ``page`` from the form or query string to *pages*.

        A page size that is not a positive integer is the client's
        mistake and answers 400.
        """
        try:
            return pages.pagination_params(self._form)
        except InvalidPageSize as exc:
            raise HTTPError(400, str(exc)) from exc

    # -- Response helpers --

    def set_header(self, name: str, value: str) -> None:
        self.writer.set_header(name, value)

    def _fail(self, exc: Exception) -> None:
        logger.exception("%s %s: response failed", self.request.method, self.request.path)
        message = str(exc) if self.engine.config.debug else "Internal Server Error"
        self.writer.set_header("Content-Type", CONTENT_TEXT)
        self.writer.write_header(500)
        self.writer.write(f"{message}\n")

    def json(self, status: int, data: Any) -> None:
        """Serialise *data* and write it with *status*.

        Unserialisable data produces a 500 plain-text body instead.
        """
        try:
            payload = json.dumps(data) + "\n"
        except (TypeError, ValueError) as exc:
            self._fail(exc)
            return
        self.writer.set_header("Content-Type", CONTENT_JSON)
        self.writer.write_header(status)
        self.writer.write(payload)

    def html(self, status: int, name: str, data: TemplateData | None = None) -> None:
        """Render template *name* with *status*.

        Rendering is buffered, so a failing template leaves the writer
        untouched and the client receives a 500 plain-text body.
        """
        self.writer.set_header("Content-Type", CONTENT_HTML)
        try:
            render = self.engine.render
            if render is None:
                msg = "no template renderer configured on this engine"
                raise ConfigurationError(msg)
            render.template(_StatusSink(self.writer, status), name, data)
        except Exception as exc:
            self._fail(exc)

    def text(self, status: int, body: str) -> None:
        self.writer.set_header("Content-Type", CONTENT_TEXT)
        self.writer.write_header(status)
        self.writer.write(body)

    def redirect(self, url: str, status: int = 302) -> None:
        self.writer.set_header("Location", url)
        self.writer.write_header(status)
