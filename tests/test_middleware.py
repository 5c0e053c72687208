"""Tests for ron.middleware: timeout, request IDs and static files."""

import time
from pathlib import Path

import anyio
import pytest

from ron.config import EngineConfig
from ron.context import Context, g
from ron.engine import Engine
from ron.errors import ConfigurationError
from ron.middleware import RequestIDMiddleware, StaticFiles, TimeoutMiddleware
from ron.testing import TestClient


def _engine(**overrides: object) -> Engine:
    return Engine(EngineConfig(templates_path=None, **overrides))  # type: ignore[arg-type]


class TestTimeoutMiddleware:
    async def test_slow_async_handler_gets_504(self) -> None:
        engine = _engine(timeout=0.05)

        @engine.get("/slow")
        async def slow(ctx: Context) -> None:
            await anyio.sleep(5)
            ctx.text(200, "too late")

        async with TestClient(engine) as client:
            response = await client.get("/slow")
        assert response.status == 504
        assert response.text == "Request timed out\n"

    async def test_slow_sync_handler_result_is_discarded(self) -> None:
        engine = _engine(timeout=0.01)

        @engine.get("/block")
        def block(ctx: Context) -> None:
            time.sleep(0.05)
            ctx.text(200, "done")

        async with TestClient(engine) as client:
            response = await client.get("/block")
        assert response.status == 504

    async def test_fast_handler_passes(self) -> None:
        engine = _engine(timeout=5.0)
        engine.get("/", lambda ctx: ctx.text(200, "quick"))
        async with TestClient(engine) as client:
            response = await client.get("/")
        assert response.status == 200
        assert response.text == "quick"

    async def test_disabled(self) -> None:
        engine = _engine(timeout=None)
        engine.routes  # noqa: B018
        assert not any(isinstance(mw, TimeoutMiddleware) for mw in engine._middleware)

    def test_rejects_non_positive(self) -> None:
        with pytest.raises(ValueError):
            TimeoutMiddleware(0)


class TestRequestIDMiddleware:
    async def test_reuses_incoming_header(self) -> None:
        engine = _engine()
        engine.use(RequestIDMiddleware())
        engine.get("/", lambda ctx: ctx.text(200, g.request_id))

        async with TestClient(engine) as client:
            response = await client.get("/", headers={"X-Request-ID": "abc-123"})
        assert response.text == "abc-123"
        assert response.header("x-request-id") == "abc-123"

    async def test_generates_timestamp(self) -> None:
        engine = _engine()
        engine.use(RequestIDMiddleware())
        engine.get("/", lambda ctx: None)

        before = time.time_ns()
        async with TestClient(engine) as client:
            response = await client.get("/")
        generated = response.header("x-request-id")
        assert generated is not None
        assert generated.isdigit()
        assert int(generated) >= before


@pytest.fixture
def assets(tmp_path: Path) -> Path:
    root = tmp_path / "assets"
    (root / "css").mkdir(parents=True)
    (root / "css" / "site.css").write_text("body{}")
    (root / "app.js").write_text("run()")
    (root / "logo.png").write_bytes(b"\x89PNG")
    (root / "docs").mkdir()
    (root / "docs" / "index.html").write_text("<h1>docs</h1>")
    (tmp_path / "secret.txt").write_text("keep out")
    return root


class TestStaticFiles:
    async def test_serves_file_with_charset(self, assets: Path) -> None:
        engine = _engine()
        engine.static("/assets", assets)
        async with TestClient(engine) as client:
            response = await client.get("/assets/css/site.css")
        assert response.status == 200
        assert response.text == "body{}"
        assert response.content_type == "text/css; charset=utf-8"

    async def test_binary_type_has_no_charset(self, assets: Path) -> None:
        engine = _engine()
        engine.static("/assets", assets)
        async with TestClient(engine) as client:
            response = await client.get("/assets/logo.png")
        assert response.content_type == "image/png"

    async def test_missing_file_falls_through(self, assets: Path) -> None:
        engine = _engine()
        engine.static("/assets", assets)
        async with TestClient(engine) as client:
            response = await client.get("/assets/nope.css")
        assert response.status == 404

    async def test_traversal_is_forbidden(self, assets: Path) -> None:
        engine = _engine()
        engine.static("/assets", assets)
        async with TestClient(engine) as client:
            response = await client.get("/assets/../secret.txt")
        assert response.status == 403

    async def test_directory_index(self, assets: Path) -> None:
        engine = _engine()
        engine.static("/assets", assets)
        async with TestClient(engine) as client:
            redirect = await client.get("/assets/docs")
            page = await client.get("/assets/docs/")
        assert redirect.status == 301
        assert redirect.header("location") == "/assets/docs/"
        assert "<h1>docs</h1>" in page.text

    async def test_post_falls_through(self, assets: Path) -> None:
        engine = _engine()
        engine.static("/assets", assets)
        async with TestClient(engine) as client:
            response = await client.post("/assets/app.js")
        assert response.status == 404

    async def test_routes_outside_prefix_still_work(self, assets: Path) -> None:
        engine = _engine()
        engine.static("/assets", assets)
        engine.get("/", lambda ctx: ctx.text(200, "home"))
        async with TestClient(engine) as client:
            response = await client.get("/")
        assert response.text == "home"

    async def test_auto_mount_from_config(self, assets: Path) -> None:
        engine = _engine(static_dir=assets, static_url="/files")
        async with TestClient(engine) as client:
            response = await client.get("/files/app.js")
        assert response.status == 200
        assert response.content_type.endswith("; charset=utf-8")

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="does not exist"):
            StaticFiles(tmp_path / "gone")
