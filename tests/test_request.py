"""Tests for ron.http.request and ron.http.values."""

import pytest

from ron.http.request import Request
from ron.http.values import Headers, Values


def _receiver(*chunks: bytes):
    messages = [
        {"type": "http.request", "body": chunk, "more_body": i < len(chunks) - 1}
        for i, chunk in enumerate(chunks)
    ] or [{"type": "http.request", "body": b"", "more_body": False}]

    async def receive() -> dict:
        return messages.pop(0)

    return receive


def _request(method: str = "GET", query: bytes = b"", headers=(), chunks=(b"",)) -> Request:
    scope = {
        "type": "http",
        "method": method,
        "path": "/things",
        "query_string": query,
        "headers": list(headers),
        "client": ("10.0.0.1", 5000),
    }
    return Request.from_asgi(scope, _receiver(*chunks))


class TestValues:
    def test_first_value_wins(self) -> None:
        values = Values("a=1&a=2&b=")
        assert values["a"] == "1"
        assert values.get_list("a") == ["1", "2"]
        assert values["b"] == ""
        assert "c" not in values

    def test_merged_keeps_order(self) -> None:
        merged = Values.merged(Values("x=body"), Values("x=query&y=1"))
        assert merged.get_list("x") == ["body", "query"]
        assert merged["y"] == "1"


class TestHeaders:
    def test_case_insensitive(self) -> None:
        headers = Headers(((b"content-type", b"text/plain"), (b"x-tag", b"a"), (b"X-Tag", b"b")))
        assert headers["Content-Type"] == "text/plain"
        assert headers.get_list("x-tag") == ["a", "b"]
        assert list(headers) == ["content-type", "x-tag"]

    def test_missing(self) -> None:
        with pytest.raises(KeyError):
            Headers()["nope"]


class TestRequest:
    def test_from_asgi(self) -> None:
        request = _request(query=b"page=2")
        assert request.method == "GET"
        assert request.query["page"] == "2"
        assert request.url == "/things?page=2"
        assert request.client == ("10.0.0.1", 5000)

    async def test_body_is_read_once(self) -> None:
        request = _request("POST", chunks=(b"ab", b"cd"))
        assert await request.body() == b"abcd"
        assert await request.body() == b"abcd"

    async def test_form_merges_body_and_query(self) -> None:
        request = _request(
            "POST",
            query=b"name=q&page=3",
            headers=[(b"content-type", b"application/x-www-form-urlencoded")],
            chunks=(b"name=posted",),
        )
        form = await request.form()
        assert form["name"] == "posted"
        assert form["page"] == "3"

    async def test_form_ignores_other_content_types(self) -> None:
        request = _request(
            "POST", headers=[(b"content-type", b"application/json")], chunks=(b'{"a": 1}',)
        )
        assert dict(await request.form()) == {}

    def test_path_params_share_body_cache(self) -> None:
        request = _request()
        request._cache["_body"] = b"cached"
        updated = request.with_path_params({"id": "1"})
        assert updated.path_params == {"id": "1"}
        assert updated._cache is request._cache

    def test_content_length(self) -> None:
        assert _request(headers=[(b"content-length", b"12")]).content_length == 12
        assert _request(headers=[(b"content-length", b"x")]).content_length is None
