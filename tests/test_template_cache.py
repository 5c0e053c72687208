"""Tests for ron.templating.roles and ron.templating.cache."""

import threading
import time
from pathlib import Path

import pytest

from ron.errors import TemplateCompileError, TemplateScanError
from ron.templating.cache import TemplateCache, build_template_cache, find_template_files
from ron.templating.roles import TemplateRole, classify, is_shared


def _write(root: Path, name: str, source: str) -> Path:
    path = root / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(source, encoding="utf-8")
    return path


class TestClassify:
    @pytest.mark.parametrize(
        ("name", "role"),
        [
            ("page.index.html", TemplateRole.LEAF),
            ("users.component.html", TemplateRole.LEAF),
            ("layout.base.html", TemplateRole.SHARED),
            ("fragment.nav.html", TemplateRole.SHARED),
            ("notes.html", TemplateRole.IGNORED),
        ],
    )
    def test_roles(self, name: str, role: TemplateRole) -> None:
        assert classify(name) is role

    def test_leaf_wins_over_shared(self) -> None:
        assert classify("layout.page.html") is TemplateRole.LEAF
        assert is_shared("layout.page.html")
        assert not is_shared("page.index.html")

    def test_only_base_name_counts(self) -> None:
        assert classify("pages/list.html") is TemplateRole.IGNORED
        assert classify(Path("layouts") / "page.home.html") is TemplateRole.LEAF


class TestFindTemplateFiles:
    def test_filters_by_extension(self, tmp_path: Path) -> None:
        _write(tmp_path, "page.a.html", "")
        _write(tmp_path, "page.b.txt", "")
        _write(tmp_path, "nested/deep/page.c.html", "")

        names = sorted(p.name for p in find_template_files(tmp_path, ".html"))
        assert names == ["page.a.html", "page.c.html"]

    def test_custom_extension(self, tmp_path: Path) -> None:
        _write(tmp_path, "page.a.gohtml", "")
        _write(tmp_path, "page.b.html", "")

        assert [p.name for p in find_template_files(tmp_path, ".gohtml")] == ["page.a.gohtml"]

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(TemplateScanError):
            find_template_files(tmp_path / "missing")


class TestBuildTemplateCache:
    def test_keys_are_leaf_base_names(self, tmp_path: Path) -> None:
        _write(tmp_path, "layout.base.html", "<header></header>")
        _write(tmp_path, "page.index.html", "<main></main>")
        _write(tmp_path, "sub/users.component.html", "<ul></ul>")
        _write(tmp_path, "readme.html", "ignored")

        compiled = build_template_cache(tmp_path)
        assert sorted(compiled) == ["page.index.html", "users.component.html"]

    def test_shared_source_precedes_leaf(self, tmp_path: Path) -> None:
        _write(tmp_path, "layout.base.html", "<header>{{ data['site'] }}</header>")
        _write(tmp_path, "page.index.html", "<main>{{ data['title'] }}</main>")

        compiled = build_template_cache(tmp_path)
        html = compiled["page.index.html"].render({"data": {"site": "Ron", "title": "Home"}})
        assert html.index("Ron") < html.index("Home")

    def test_no_leaves_gives_empty_mapping(self, tmp_path: Path) -> None:
        _write(tmp_path, "layout.base.html", "<header></header>")
        assert build_template_cache(tmp_path) == {}

    def test_syntax_error_aborts_build(self, tmp_path: Path) -> None:
        _write(tmp_path, "page.good.html", "ok")
        _write(tmp_path, "page.bad.html", "{% if data %}never closed")

        with pytest.raises(TemplateCompileError, match="page.bad.html"):
            build_template_cache(tmp_path)

    def test_dual_role_leaf_is_shared_with_other_leaves(self, tmp_path: Path) -> None:
        _write(tmp_path, "layout.page.html", "<nav>menu</nav>")
        _write(tmp_path, "page.index.html", "<main>home</main>")

        compiled = build_template_cache(tmp_path)
        assert sorted(compiled) == ["layout.page.html", "page.index.html"]
        index = compiled["page.index.html"].render({"data": {}})
        assert index.index("menu") < index.index("home")
        assert compiled["layout.page.html"].render({"data": {}}).count("menu") == 1

    def test_invalid_utf8_is_scan_error(self, tmp_path: Path) -> None:
        (tmp_path / "page.bad.html").write_bytes(b"\xff\xfe broken")

        with pytest.raises(TemplateScanError, match="page.bad.html"):
            build_template_cache(tmp_path)

    def test_missing_root(self, tmp_path: Path) -> None:
        with pytest.raises(TemplateScanError):
            build_template_cache(tmp_path / "nope")


class TestTemplateCache:
    def test_builds_once(self) -> None:
        calls: list[int] = []

        def build() -> dict:
            calls.append(1)
            return {"page.x.html": object()}

        cache = TemplateCache()
        assert not cache.is_built
        first = cache.get(build)
        second = cache.get(build)
        assert first is second
        assert len(calls) == 1
        assert cache.is_built
        assert len(cache) == 1

    def test_failed_build_is_retried(self) -> None:
        attempts: list[int] = []

        def build() -> dict:
            attempts.append(1)
            if len(attempts) == 1:
                raise TemplateScanError("disk unavailable")
            return {}

        cache = TemplateCache()
        with pytest.raises(TemplateScanError):
            cache.get(build)
        assert not cache.is_built
        assert cache.get(build) == {}
        assert len(attempts) == 2

    def test_concurrent_first_use_builds_once(self) -> None:
        workers = 8
        barrier = threading.Barrier(workers)
        calls: list[int] = []
        calls_lock = threading.Lock()

        def slow_build() -> dict:
            with calls_lock:
                calls.append(1)
            time.sleep(0.05)
            return {"page.x.html": object()}

        cache = TemplateCache()
        results: list[dict] = []
        results_lock = threading.Lock()

        def worker() -> None:
            barrier.wait()
            templates = cache.get(slow_build)
            with results_lock:
                results.append(templates)

        threads = [threading.Thread(target=worker) for _ in range(workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(calls) == 1
        assert len(results) == workers
        assert all(templates is results[0] for templates in results)
