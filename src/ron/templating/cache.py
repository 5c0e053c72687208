"""Template cache builder.

Walks a template directory, sorts files into shared and leaf sources
(see ``ron.templating.roles``), and compiles one kida template per leaf.

Every compiled unit is the text of *all* shared files, in traversal
order, followed by the leaf's own text. A leaf that is also shared
is left out of its own prelude. Macros defined in a fragment
are therefore callable from any page, and layout markup is emitted
before the page body. The build is all-or-nothing: any unreadable file
or syntax error aborts it.
"""

import logging
import threading
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

from kida import Environment

from ron.errors import TemplateCompileError, TemplateScanError
from ron.templating.roles import TemplateRole, classify, is_shared

if TYPE_CHECKING:
    from kida.template import Template

logger = logging.getLogger("ron.templating")

type CompiledTemplates = dict[str, "Template"]


def _raise(exc: OSError) -> None:
    raise exc


def find_template_files(root: str | Path, extension: str = ".html") -> list[Path]:
    """List every file under *root* whose suffix is *extension*.

    Order is the directory walk order (top-down, entries as the OS
    returns them), not sorted. A missing or unreadable directory raises
    ``TemplateScanError``.
    """
    root = Path(root)
    files: list[Path] = []
    try:
        for dirpath, _dirnames, filenames in root.walk(on_error=_raise):
            files.extend(
                dirpath / name for name in filenames if Path(name).suffix == extension
            )
    except OSError as exc:
        msg = f"cannot scan template directory {str(root)!r}: {exc}"
        raise TemplateScanError(msg) from exc
    return files


def create_environment(
    functions: Mapping[str, Callable[..., Any]],
    *,
    autoescape: bool = True,
) -> Environment:
    """Create the kida Environment shared by every unit of one build."""
    env = Environment(autoescape=autoescape)
    for name, func in functions.items():
        env.add_global(name, func)
    return env


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"cannot read template {str(path)!r}: {exc}"
        raise TemplateScanError(msg) from exc


def build_template_cache(
    root: str | Path,
    *,
    extension: str = ".html",
    functions: Mapping[str, Callable[..., Any]] | None = None,
    autoescape: bool = True,
) -> CompiledTemplates:
    """Compile every leaf template under *root*.

    Returns a mapping keyed by the leaf's on-disk base name (extension
    included). Two leaves with the same base name in different
    directories: the later one in walk order wins.
    """
    files = find_template_files(root, extension)

    shared_sources: list[tuple[Path, str]] = []
    leaves: list[Path] = []
    for path in files:
        match classify(path):
            case TemplateRole.SHARED:
                shared_sources.append((path, _read(path)))
            case TemplateRole.LEAF:
                leaves.append(path)
                if is_shared(path):
                    shared_sources.append((path, _read(path)))
            case TemplateRole.IGNORED:
                pass

    env = create_environment(functions or {}, autoescape=autoescape)

    compiled: CompiledTemplates = {}
    for path in leaves:
        # a dual-role leaf is not prepended to itself
        prelude = "".join(text for shared, text in shared_sources if shared != path)
        source = prelude + _read(path)
        try:
            compiled[path.name] = env.from_string(source)
        except Exception as exc:
            msg = f"cannot compile template {path.name!r}: {exc}"
            raise TemplateCompileError(msg) from exc

    logger.debug(
        "template cache built: %d leaves, %d shared, root=%s",
        len(compiled),
        len(shared_sources),
        root,
    )
    return compiled


class TemplateCache:
    """Build-once holder for a compiled template mapping.

    The first ``get()`` runs the builder while holding a lock; callers
    racing on first use wait for that single build. A failed build
    leaves the cache empty so the next call tries again.
    """

    __slots__ = ("_lock", "_templates")

    def __init__(self) -> None:
        self._templates: CompiledTemplates | None = None
        self._lock = threading.Lock()

    @property
    def is_built(self) -> bool:
        return self._templates is not None

    def __len__(self) -> int:
        return len(self._templates or {})

    def get(self, build: Callable[[], CompiledTemplates]) -> CompiledTemplates:
        templates = self._templates
        if templates is not None:
            return templates
        with self._lock:
            if self._templates is None:
                self._templates = build()
            return self._templates
