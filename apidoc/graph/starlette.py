"""Build a :class:`DispatchGraph` from a Starlette application's routing table."""
from __future__ import annotations

import inspect
import logging
from typing import Any, Dict, Iterable, Sequence

from starlette.routing import BaseRoute, Host, Mount, Route

from ..metadata import is_hidden
from .dispatch import DispatchGraph

logger = logging.getLogger("apidoc.graph")


def _routes_of(target: Any) -> Sequence[BaseRoute]:
    if isinstance(target, (list, tuple)):
        return target
    routes = getattr(target, "routes", None)
    if routes is None:
        return ()
    return routes


class _GraphBuilder:
    def __init__(self, graph: DispatchGraph) -> None:
        self.graph = graph
        # Routers and routes are memoised by identity so a router mounted
        # twice maps to one node, and a router mounting itself forms a cycle.
        self._composites: Dict[int, int] = {}
        self._leaves: Dict[int, int] = {}

    def adopt(self, container: Any, node_id: int) -> None:
        self._composites[id(container)] = node_id

    def composite(self, container: Any, name: str | None) -> int:
        key = id(container)
        existing = self._composites.get(key)
        if existing is not None:
            return existing
        node_id = self.graph.add_node(name=name)
        self._composites[key] = node_id
        self.populate(node_id, _routes_of(container))
        return node_id

    def leaf(self, route: Route) -> int:
        key = id(route)
        existing = self._leaves.get(key)
        if existing is not None:
            return existing
        endpoint = route.endpoint
        methods = None if inspect.isclass(endpoint) else (route.methods or {"GET"})
        node_id = self.graph.add_node(
            name=route.name, resource_class=endpoint, methods=methods
        )
        self._leaves[key] = node_id
        return node_id

    def populate(self, parent: int, routes: Iterable[BaseRoute]) -> None:
        for route in routes:
            if isinstance(route, Mount):
                child = self.composite(route.app, route.name)
                self.graph.link(parent, child, route.path)
            elif isinstance(route, Host):
                child = self.composite(route.app, route.name)
                self.graph.link(parent, child)
            elif isinstance(route, Route):
                if is_hidden(route.endpoint):
                    continue
                self.graph.link(parent, self.leaf(route), route.path)
            else:
                logger.debug(
                    "graph.skip_route",
                    extra={"route_type": type(route).__name__},
                )


def graph_from_app(target: Any) -> DispatchGraph:
    """Translate *target* (an app, router or route list) into a dispatch graph."""

    if isinstance(target, DispatchGraph):
        return target
    graph = DispatchGraph(application=target)
    container = getattr(target, "router", target)
    builder = _GraphBuilder(graph)
    builder.adopt(container, graph.root)
    builder.populate(graph.root, _routes_of(container))
    return graph


__all__ = ["graph_from_app"]
