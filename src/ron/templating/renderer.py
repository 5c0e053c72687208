"""HTML renderer: resolves compiled templates and writes rendered bytes.

``Render`` is long-lived and shared by every request. With
``enable_cache=False`` the template directory is rescanned and
recompiled on every call, so edits show up on the next request. With
``enable_cache=True`` the first call builds the mapping and every later
call reuses it for the life of the process; on-disk changes are never
picked up.

Rendering is buffered: a template that fails half-way writes nothing
to the sink.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from ron.errors import TemplateExecutionError, TemplateNotFound
from ron.pagination import Pages
from ron.templating.cache import CompiledTemplates, TemplateCache, build_template_cache

logger = logging.getLogger("ron.templating")


class Sink(Protocol):
    """Anything rendered bytes can be written to (file, BytesIO, ResponseWriter)."""

    def write(self, data: bytes, /) -> Any: ...


@dataclass(frozen=True, slots=True)
class TemplateData:
    """Values handed to a template.

    Inside templates these are ``data`` and ``pages``::

        <h1>{{ data.title }}</h1>
        {% if pages %}page {{ pages.actual_page }} of {{ pages.total_pages() }}{% end %}
    """

    data: Mapping[str, Any] = field(default_factory=dict)
    pages: Pages | None = None

    def context(self) -> dict[str, Any]:
        return {"data": self.data, "pages": self.pages}


def default_if_empty(fallback: str, value: Any) -> Any:
    """Template helper: *fallback* when *value* is None or blank."""
    if value is None or str(value).strip() == "":
        return fallback
    return value


BUILTIN_FUNCTIONS: dict[str, Callable[..., Any]] = {
    "default": default_if_empty,
}


class Render:
    """Template renderer with an optional build-once cache.

    Usage::

        render = Render("templates", enable_cache=True)
        render.template(sink, "page.index.html", TemplateData({"title": "Home"}))

    Template names are exact on-disk base names, extension included.
    """

    __slots__ = ("_cache", "autoescape", "enable_cache", "extension", "functions", "templates_path")

    def __init__(
        self,
        templates_path: str | Path = "templates",
        *,
        enable_cache: bool = False,
        functions: Mapping[str, Callable[..., Any]] | None = None,
        extension: str = ".html",
        autoescape: bool = True,
    ) -> None:
        self.templates_path = Path(templates_path)
        self.enable_cache = enable_cache
        self.extension = extension
        self.autoescape = autoescape
        self.functions: dict[str, Callable[..., Any]] = {**BUILTIN_FUNCTIONS, **(functions or {})}
        self._cache = TemplateCache()

    def function(self, name: str | None = None) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a helper callable inside every template, via decorator."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self.functions[name or func.__name__] = func
            return func

        return decorator

    def _build(self) -> CompiledTemplates:
        return build_template_cache(
            self.templates_path,
            extension=self.extension,
            functions=self.functions,
            autoescape=self.autoescape,
        )

    def templates(self) -> CompiledTemplates:
        """Resolve the compiled mapping: cached, or rebuilt from disk."""
        logger.debug(
            "template cache: enabled=%s built=%s size=%d",
            self.enable_cache,
            self._cache.is_built,
            len(self._cache),
        )
        if self.enable_cache:
            return self._cache.get(self._build)
        return self._build()

    def render(self, name: str, data: TemplateData | None = None) -> str:
        """Render *name* fully in memory and return the text."""
        if data is None:
            data = TemplateData()

        compiled = self.templates().get(name)
        if compiled is None:
            raise TemplateNotFound(name)

        try:
            return compiled.render(data.context())
        except Exception as exc:
            msg = f"error rendering template {name!r}: {exc}"
            raise TemplateExecutionError(msg) from exc

    def template(self, sink: Sink, name: str, data: TemplateData | None = None) -> None:
        """Render *name* and write the UTF-8 bytes to *sink*.

        Raises ``TemplateScanError``, ``TemplateCompileError``,
        ``TemplateNotFound`` or ``TemplateExecutionError``; in each case
        nothing has been written. Errors from ``sink.write`` propagate.
        """
        sink.write(self.render(name, data).encode("utf-8"))
