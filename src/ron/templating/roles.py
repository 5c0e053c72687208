"""Template file roles, decided from the file name alone.

The naming convention is the on-disk contract template authors follow:

- ``*page*`` / ``*component*``  -> LEAF: compiled as its own unit
- ``*layout*`` / ``*fragment*`` -> SHARED: included in every leaf unit
- anything else                 -> IGNORED

A name matching both families (``layout.page.html``) is a LEAF that is
also shared: it compiles as its own unit and is included in every
*other* leaf unit.
"""

from enum import Enum
from pathlib import PurePath

LEAF_MARKERS: tuple[str, ...] = ("page", "component")
SHARED_MARKERS: tuple[str, ...] = ("layout", "fragment")


class TemplateRole(Enum):
    SHARED = "shared"
    LEAF = "leaf"
    IGNORED = "ignored"


def is_shared(filename: str | PurePath) -> bool:
    """Whether the file is included in other leaves' units."""
    base = PurePath(filename).name
    return any(marker in base for marker in SHARED_MARKERS)


def classify(filename: str | PurePath) -> TemplateRole:
    """Return the role of a template file from its base name.

    Directories in *filename* are ignored: ``pages/list.html`` is
    classified by ``list.html`` and therefore IGNORED.
    """
    base = PurePath(filename).name
    if any(marker in base for marker in LEAF_MARKERS):
        return TemplateRole.LEAF
    if any(marker in base for marker in SHARED_MARKERS):
        return TemplateRole.SHARED
    return TemplateRole.IGNORED
