"""Path placeholder converters.

Each converter is the regex one path segment must match. ``path`` is
the exception: it swallows the rest of the URL, slashes included.
Captured values always reach handlers as strings.
"""

CONVERTERS: dict[str, str] = {
    "str": r"[^/]+",
    "int": r"-?\d+",
    "float": r"-?\d+(?:\.\d+)?",
    "path": r".+",
}
