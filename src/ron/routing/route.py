"""Route and RouteMatch frozen dataclasses."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Segment:
    """One parsed piece of a route pattern.

    ``/users`` is static; ``/{id:int}`` is a placeholder named ``id``
    with converter ``int``.
    """

    value: str
    param_name: str | None = None
    param_type: str = "str"

    @property
    def is_param(self) -> bool:
        return self.param_name is not None


@dataclass(frozen=True, slots=True)
class Route:
    """A registered handler for one pattern and a set of methods."""

    path: str
    handler: Callable[..., Any]
    methods: frozenset[str]
    name: str | None = None


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: Route
    path_params: dict[str, str]
