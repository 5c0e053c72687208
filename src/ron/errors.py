"""Ron exception hierarchy.

Shared across Router, Engine, Render, and middleware so every module
raises and catches the same types.
"""

from dataclasses import dataclass


class RonError(Exception):
    """Base for all ron-specific errors."""


class ConfigurationError(RonError):
    """Raised when engine configuration is invalid.

    Typically raised during setup (``Engine.static``) or when a handler
    asks for a collaborator that was never configured (no renderer).
    """


@dataclass(frozen=True, slots=True)
class HTTPError(RonError):
    """An error that maps directly to an HTTP status code.

    Raised by the router, middleware, or handlers. The ASGI handler
    catches these and dispatches to the matching ``@engine.error()`` handler.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405: route exists but not for this HTTP method."""

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )


# -- Templates --


class TemplateError(RonError):
    """Base for template scanning, lookup, compilation and execution errors."""


class TemplateScanError(TemplateError):
    """The template directory could not be walked or a file could not be read."""


class TemplateNotFound(TemplateError):  # noqa: N818
    """A template name is absent from the compiled mapping.

    The directory scan itself succeeded. Names are exact on-disk
    base names, extension included.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"template {name!r} not found in cache")


class TemplateCompileError(TemplateError):
    """A template source failed to compile. Aborts the whole cache build."""


class TemplateExecutionError(TemplateError):
    """A compiled template raised while rendering. Nothing was written."""


# -- Pagination --


class PaginationError(RonError):
    """Base for pagination errors."""


class InvalidPageSize(PaginationError, ValueError):  # noqa: N818
    """``elements_per_page`` is zero or negative."""


class SliceBoundsError(PaginationError, IndexError):
    """The collection is shorter than ``total_elements`` claims."""


# -- Binding --


class BindError(RonError):
    """Request data could not be bound to the target dataclass."""
