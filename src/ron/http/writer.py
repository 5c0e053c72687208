"""Outbound response sink handed to route handlers.

Handlers write through ``Context`` helpers (or directly) into a
``ResponseWriter``; the engine turns it into an immutable ``Response``
once the handler returns.

The status line behaves like a real socket: the first
``write_header()`` wins, and the first ``write()`` without one
implies 200. Later status changes are ignored.
"""

from ron.http.response import CONTENT_TEXT, Response


class ResponseWriter:
    """Buffering writer with header-written tracking."""

    __slots__ = ("_body", "_headers", "_status", "header_written")

    def __init__(self) -> None:
        self._status = 200
        self._headers: dict[str, str] = {}
        self._body = bytearray()
        self.header_written = False

    @property
    def headers(self) -> dict[str, str]:
        """Mutable header map. Keys are stored as given."""
        return self._headers

    @property
    def status(self) -> int:
        return self._status

    def set_header(self, name: str, value: str) -> None:
        for key in list(self._headers):
            if key.lower() == name.lower():
                del self._headers[key]
        self._headers[name] = value

    def write_header(self, status: int) -> None:
        if self.header_written:
            return
        self.header_written = True
        self._status = status

    def write(self, data: bytes | str) -> int:
        if not self.header_written:
            self.write_header(200)
        chunk = data.encode("utf-8") if isinstance(data, str) else data
        self._body.extend(chunk)
        return len(chunk)

    @property
    def written(self) -> bool:
        """True once a status or any body bytes were produced."""
        return self.header_written or bool(self._body)

    def to_response(self) -> Response:
        content_type = CONTENT_TEXT
        extra: list[tuple[str, str]] = []
        for name, value in self._headers.items():
            if name.lower() == "content-type":
                content_type = value
            else:
                extra.append((name, value))
        return Response(
            body=bytes(self._body),
            status=self._status,
            content_type=content_type,
            headers=tuple(extra),
        )
