"""Routing: compiled route table with O(path-depth) matching."""

from snippetbox.routing.route import Route, RouteMatch
from snippetbox.routing.router import Router

__all__ = ["Route", "RouteMatch", "Router"]
