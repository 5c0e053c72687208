"""Trie-based router.

Routes are added during engine setup and frozen with ``compile()``
before the first request. Matching walks one trie level per path
segment, preferring static children over placeholders over a trailing
``path`` catch-all.
"""

import re

from ron.errors import ConfigurationError, MethodNotAllowed, NotFound
from ron.routing.params import CONVERTERS
from ron.routing.route import Route, RouteMatch, Segment

# {name}, {name:type} or {name...}
_PLACEHOLDER = re.compile(
    r"^\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?::(?P<type>\w+)|(?P<rest>\.\.\.))?\}$"
)


def parse_path(path: str) -> list[Segment]:
    """Split a route pattern into segments.

    Examples::

        "/users"             -> [Segment("users")]
        "/users/{id:int}"    -> [Segment("users"), Segment("{id:int}", "id", "int")]
        "/files/{rest...}"   -> [Segment("files"), Segment("{rest...}", "rest", "path")]
    """
    segments: list[Segment] = []
    parts = [p for p in path.strip("/").split("/") if p]
    for index, part in enumerate(parts):
        if part.startswith("<") and part.endswith(">"):
            msg = f"Route {path!r} uses <param> syntax; write placeholders as {{param}}."
            raise ConfigurationError(msg)
        if not part.startswith("{"):
            segments.append(Segment(part))
            continue
        m = _PLACEHOLDER.match(part)
        if m is None:
            msg = f"Invalid placeholder {part!r} in route {path!r}."
            raise ConfigurationError(msg)
        param_type = "path" if m["rest"] else (m["type"] or "str")
        if param_type not in CONVERTERS:
            msg = f"Unknown converter {param_type!r} in route {path!r}."
            raise ConfigurationError(msg)
        if param_type == "path" and index != len(parts) - 1:
            msg = f"Catch-all placeholder must be last in route {path!r}."
            raise ConfigurationError(msg)
        segments.append(Segment(part, m["name"], param_type))
    return segments


class _Node:
    """A trie node. Mutable until the router is compiled."""

    __slots__ = ("catch_all", "catch_all_name", "param", "routes", "static")

    def __init__(self) -> None:
        self.static: dict[str, _Node] = {}
        # (name, compiled converter regex, child)
        self.param: tuple[str, re.Pattern[str], _Node] | None = None
        self.catch_all: dict[str, Route] = {}
        self.catch_all_name = "path"
        self.routes: dict[str, Route] = {}


class Router:
    """Compiled router.

    Usage::

        router = Router()
        router.add(Route("/users/{id:int}", handler, frozenset({"GET"})))
        router.compile()
        match = router.match("GET", "/users/42")
    """

    __slots__ = ("_compiled", "_root", "_routes")

    def __init__(self) -> None:
        self._root = _Node()
        self._routes: list[Route] = []
        self._compiled = False

    @property
    def routes(self) -> list[Route]:
        """Registered routes in registration order."""
        return list(self._routes)

    def add(self, route: Route) -> None:
        """Add a route. Re-registering a pattern + method raises ``ConfigurationError``."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        node = self._root
        table: dict[str, Route] | None = None
        for seg in parse_path(route.path):
            if seg.param_type == "path" and seg.is_param:
                node.catch_all_name = seg.param_name or "path"
                table = node.catch_all
                break
            if seg.is_param:
                if node.param is None:
                    pattern = CONVERTERS[seg.param_type]
                    node.param = (seg.param_name or "", re.compile(f"^{pattern}$"), _Node())
                elif node.param[0] != seg.param_name:
                    msg = (
                        f"Route {route.path!r} names placeholder {seg.param_name!r} where "
                        f"another route uses {node.param[0]!r}."
                    )
                    raise ConfigurationError(msg)
                node = node.param[2]
            else:
                node = node.static.setdefault(seg.value, _Node())
        if table is None:
            table = node.routes

        for method in route.methods:
            if method in table:
                msg = f"Duplicate route: {method} {route.path!r} is already registered."
                raise ConfigurationError(msg)
            table[method] = route
        self._routes.append(route)

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch:
        """Match *method* and *path*.

        Raises ``NotFound`` when no pattern matches the path and
        ``MethodNotAllowed`` when one does but not for *method*. ``HEAD``
        falls back to a ``GET`` route.
        """
        parts = [p for p in path.strip("/").split("/") if p]
        found = self._walk(self._root, parts, 0, {})
        if found is None:
            raise NotFound()

        table, params = found
        route = table.get(method)
        if route is None and method == "HEAD":
            route = table.get("GET")
        if route is None:
            raise MethodNotAllowed(frozenset(table))
        return RouteMatch(route=route, path_params=params)

    def _walk(
        self,
        node: _Node,
        parts: list[str],
        index: int,
        params: dict[str, str],
    ) -> tuple[dict[str, Route], dict[str, str]] | None:
        if index == len(parts):
            return (node.routes, params) if node.routes else None

        part = parts[index]

        child = node.static.get(part)
        if child is not None:
            found = self._walk(child, parts, index + 1, params)
            if found is not None:
                return found

        if node.param is not None:
            name, regex, param_node = node.param
            if regex.match(part):
                found = self._walk(param_node, parts, index + 1, {**params, name: part})
                if found is not None:
                    return found

        if node.catch_all:
            return node.catch_all, {**params, node.catch_all_name: "/".join(parts[index:])}

        return None
