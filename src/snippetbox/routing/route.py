"""Route and RouteMatch frozen dataclasses."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route path.

    Static:    ``/snippet``        (is_param=False)
    Param:     ``/{id}``           (is_param=True, param_name="id")
    Catch-all: ``/{path:path}``    (is_param=True, catch_all=True)
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    catch_all: bool = False


@dataclass(frozen=True, slots=True)
class Route:
    """A route definition: a path pattern, its allowed methods and the
    chain-wrapped handler that serves them.
    """

    path: str
    handler: Callable[..., Any]
    methods: frozenset[str] = field(default=frozenset({"GET"}))
    name: str | None = None

    @classmethod
    def of(
        cls,
        path: str,
        handler: Callable[..., Any],
        methods: Iterable[str] = ("GET",),
        name: str | None = None,
    ) -> Route:
        """Build a route, normalising *methods* to an upper-case frozenset."""
        return cls(path, handler, frozenset(m.upper() for m in methods), name)


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: Route
    path_params: dict[str, str]
