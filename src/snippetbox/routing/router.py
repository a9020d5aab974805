"""Compiled router with trie-based path matching.

Routes are registered at startup and compiled into an immutable lookup
structure before the first request.

Patterns support static segments, ``{name}`` (one segment) and
``{name:path}`` (the rest of the path, at least one segment). Values are
captured as strings; handlers convert and validate them.
"""

from dataclasses import dataclass, field

from snippetbox.errors import MethodNotAllowed, NotFound
from snippetbox.routing.route import PathSegment, Route, RouteMatch


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route path string into segments.

    Examples::

        "/snippet/create"       -> [PathSegment("snippet"), PathSegment("create")]
        "/snippet/view/{id}"    -> [..., PathSegment("{id}", is_param=True, param_name="id")]
        "/static/{path:path}"   -> [..., PathSegment("{path:path}", is_param=True, catch_all=True)]
    """
    segments: list[PathSegment] = []
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if not (part.startswith("{") and part.endswith("}")):
            segments.append(PathSegment(value=part))
            continue
        name, _, kind = part[1:-1].partition(":")
        if kind not in ("", "path"):
            msg = f"Unsupported path parameter type {kind!r} in {path!r}"
            raise ValueError(msg)
        segments.append(
            PathSegment(value=part, is_param=True, param_name=name, catch_all=kind == "path")
        )
    return segments


@dataclass(slots=True)
class _TrieNode:
    """A node in the route trie. Mutable during compilation only."""

    # Static segment children: "snippet" -> node
    children: dict[str, _TrieNode] = field(default_factory=dict)
    # Single parameter child per level: (param name, node)
    param_child: tuple[str, _TrieNode] | None = None
    # Catch-all edge: (param name, routes by method)
    catch_all: tuple[str, dict[str, Route]] | None = None
    # Routes ending at this node, keyed by HTTP method
    routes_by_method: dict[str, Route] = field(default_factory=dict)


class Router:
    """Compiled router.

    Usage::

        router = Router()
        router.add(Route.of("/snippet/view/{id}", view, ("GET",)))
        router.compile()
        match = router.match("GET", "/snippet/view/42")
        match.path_params  # {"id": "42"}
    """

    __slots__ = ("_compiled", "_root", "_routes")

    def __init__(self) -> None:
        self._root = _TrieNode()
        self._routes: list[Route] = []
        self._compiled = False

    @property
    def routes(self) -> tuple[Route, ...]:
        return tuple(self._routes)

    def add(self, route: Route) -> None:
        """Add a route. Must be called before ``compile()``."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        node = self._root
        segments = parse_path(route.path)
        for index, seg in enumerate(segments):
            if seg.catch_all:
                if index != len(segments) - 1:
                    msg = f"Catch-all parameter must be the last segment: {route.path!r}"
                    raise ValueError(msg)
                if node.catch_all is None:
                    node.catch_all = (seg.param_name or "path", {})
                _register(node.catch_all[1], route)
                self._routes.append(route)
                return

            if seg.is_param:
                if node.param_child is None:
                    node.param_child = (seg.param_name or "", _TrieNode())
                elif node.param_child[0] != seg.param_name:
                    msg = (
                        f"Conflicting parameter names at the same position: "
                        f"{node.param_child[0]!r} and {seg.param_name!r} in {route.path!r}"
                    )
                    raise ValueError(msg)
                node = node.param_child[1]
            else:
                node = node.children.setdefault(seg.value, _TrieNode())

        _register(node.routes_by_method, route)
        self._routes.append(route)

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request against the compiled routes.

        Raises:
            NotFound: No route matches the path.
            MethodNotAllowed: The path matches but not for *method*.
        """
        parts = [p for p in path.strip("/").split("/") if p]
        found = _match_node(self._root, parts, 0, {})
        if found is None:
            raise NotFound(f"No route matches {method} {path!r}")

        routes, params = found
        route = routes.get(method)
        if route is None and method == "HEAD":
            route = routes.get("GET")
        if route is None:
            allowed = set(routes)
            if "GET" in allowed:
                allowed.add("HEAD")
            raise MethodNotAllowed(frozenset(allowed))
        return RouteMatch(route=route, path_params=params)


def _register(table: dict[str, Route], route: Route) -> None:
    for method in route.methods:
        if method in table:
            msg = f"Duplicate route: {method} {route.path!r}"
            raise ValueError(msg)
        table[method] = route


def _match_node(
    node: _TrieNode,
    parts: list[str],
    index: int,
    params: dict[str, str],
) -> tuple[dict[str, Route], dict[str, str]] | None:
    """Recursively match path parts against the trie. Static edges win."""
    if index == len(parts):
        return (node.routes_by_method, params) if node.routes_by_method else None

    part = parts[index]

    child = node.children.get(part)
    if child is not None:
        found = _match_node(child, parts, index + 1, params)
        if found is not None:
            return found

    if node.param_child is not None:
        name, param_node = node.param_child
        found = _match_node(param_node, parts, index + 1, {**params, name: part})
        if found is not None:
            return found

    if node.catch_all is not None:
        name, routes = node.catch_all
        return routes, {**params, name: "/".join(parts[index:])}

    return None
