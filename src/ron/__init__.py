"""ron: a small ASGI framework for server-rendered HTML.

Layout/fragment/page templates compiled once and cached, offset
pagination helpers, route groups with their own middleware, and
dataclass binding for JSON and form bodies.

Basic usage::

    from ron import Engine, Context, TemplateData

    engine = Engine()

    @engine.get("/")
    def index(ctx: Context) -> None:
        ctx.html(200, "page.index.html", TemplateData({"title": "Home"}))

    engine.run()
"""

from importlib import import_module

__version__ = "0.1.0"
__all__ = [
    "BindError",
    "ConfigurationError",
    "Context",
    "Engine",
    "EngineConfig",
    "HTTPError",
    "Middleware",
    "MethodNotAllowed",
    "Next",
    "NotFound",
    "Page",
    "Pages",
    "Render",
    "Request",
    "Response",
    "ResponseWriter",
    "RonError",
    "RouteGroup",
    "TemplateData",
    "TemplateNotFound",
    "bind_form",
    "bind_json",
    "g",
    "get_request",
]

# public name -> defining module, imported on first access
_LAZY = {
    "BindError": "ron.errors",
    "ConfigurationError": "ron.errors",
    "HTTPError": "ron.errors",
    "MethodNotAllowed": "ron.errors",
    "NotFound": "ron.errors",
    "RonError": "ron.errors",
    "TemplateNotFound": "ron.errors",
    "Context": "ron.context",
    "g": "ron.context",
    "get_request": "ron.context",
    "Engine": "ron.engine",
    "RouteGroup": "ron.engine",
    "EngineConfig": "ron.config",
    "Middleware": "ron.middleware.protocol",
    "Next": "ron.middleware.protocol",
    "Page": "ron.pagination",
    "Pages": "ron.pagination",
    "Render": "ron.templating.renderer",
    "TemplateData": "ron.templating.renderer",
    "Request": "ron.http.request",
    "Response": "ron.http.response",
    "ResponseWriter": "ron.http.writer",
    "bind_form": "ron.binding",
    "bind_json": "ron.binding",
}


def __getattr__(name: str) -> object:
    """Lazy imports for the public API. Keeps ``import ron`` cheap."""
    module = _LAZY.get(name)
    if module is None:
        msg = f"module 'ron' has no attribute {name!r}"
        raise AttributeError(msg)
    return getattr(import_module(module), name)
