"""Static file serving middleware.

Maps a URL prefix onto a directory. Requests outside the prefix, and
files that do not exist, fall through to the next handler.
"""

import logging
import mimetypes
from pathlib import Path

from ron.errors import ConfigurationError
from ron.http.request import Request
from ron.http.response import Response, error_response
from ron.middleware.protocol import Next

logger = logging.getLogger("ron.server")

_TEXTUAL = ("application/javascript", "application/json", "image/svg+xml")


def _content_type(path: Path) -> str:
    content_type, _ = mimetypes.guess_type(path.name)
    if content_type is None:
        return "application/octet-stream"
    if content_type.startswith("text/") or content_type in _TEXTUAL:
        return f"{content_type}; charset=utf-8"
    return content_type


class StaticFiles:
    """Serve files from *directory* under *prefix*.

    Only ``GET`` and ``HEAD`` are served. The resolved file must stay
    inside *directory* (symlinks included); anything else is 403. A
    directory request serves its ``index.html`` when present.

    Usage::

        engine.use(StaticFiles("./assets", prefix="/assets"))
    """

    __slots__ = ("_cache_control", "_directory", "_index", "_prefix")

    def __init__(
        self,
        directory: str | Path,
        prefix: str = "/static",
        *,
        index: str = "index.html",
        cache_control: str = "public, max-age=3600",
    ) -> None:
        path = Path(directory)
        if not path.is_dir():
            logger.error("static directory %s does not exist", path)
            msg = f"static directory {str(path)!r} does not exist"
            raise ConfigurationError(msg)
        self._directory = path.resolve()
        self._index = index
        self._cache_control = cache_control
        stripped = "/" + prefix.strip("/")
        # "/" serves from the root; keep it as ""
        self._prefix = "" if stripped == "/" else stripped

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def prefix(self) -> str:
        return self._prefix or "/"

    async def __call__(self, request: Request, next: Next) -> Response:
        if request.method not in ("GET", "HEAD"):
            return await next(request)

        path = request.path
        if self._prefix:
            if path != self._prefix and not path.startswith(self._prefix + "/"):
                return await next(request)
            relative = path[len(self._prefix) :].lstrip("/")
        else:
            relative = path.lstrip("/")

        target = (self._directory / relative).resolve() if relative else self._directory
        if not target.is_relative_to(self._directory):
            logger.warning("blocked static path outside root: %s", path)
            return error_response(403, "Forbidden")

        if target.is_dir():
            index = target / self._index
            if not index.is_file():
                return await next(request)
            if relative and not path.endswith("/"):
                return Response(status=301).with_header("Location", path + "/")
            target = index

        if not target.is_file():
            return await next(request)

        body = target.read_bytes()
        return Response(body=body, content_type=_content_type(target)).with_headers(
            {"Content-Length": str(len(body)), "Cache-Control": self._cache_control}
        )
