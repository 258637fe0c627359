"""Arena representation of a host application's dispatch graph.

Nodes are addressed by integer id and edges carry the path segment the parent
contributes before routing to the child. An empty segment marks a transparent
node (a filter or host matcher) that routes without consuming any path.
"""
from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Tuple

from ..utils.errors import MissingResourceError

HTTP_METHODS: Tuple[str, ...] = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")

Edge = Tuple[str, int]


def canonical_methods(methods: Iterable[str]) -> Tuple[str, ...]:
    """Upper-case, de-duplicate and order *methods*.

    ``HEAD`` is dropped when ``GET`` is present since frameworks add it
    implicitly for every GET handler.
    """

    wanted = {str(method).upper() for method in methods}
    if "GET" in wanted:
        wanted.discard("HEAD")
    ordered = [method for method in HTTP_METHODS if method in wanted]
    ordered.extend(sorted(wanted.difference(HTTP_METHODS)))
    return tuple(ordered)


def methods_of_class(resource_class: Any) -> Tuple[str, ...]:
    """Return the HTTP methods a class-based resource declares handlers for."""

    if not inspect.isclass(resource_class):
        return ()
    declared = [
        method
        for method in HTTP_METHODS
        if callable(getattr(resource_class, method.lower(), None))
    ]
    return canonical_methods(declared)


@dataclass(slots=True)
class DispatchNode:
    node_id: int
    name: Optional[str] = None
    resource_class: Any = None
    methods: Optional[Tuple[str, ...]] = None
    edges: List[Edge] = field(default_factory=list)

    @property
    def is_leaf(self) -> bool:
        return self.resource_class is not None


class DispatchGraph:
    """Read-mostly routing graph; the introspection core never mutates it."""

    def __init__(self, *, application: Any = None) -> None:
        self.application = application
        self._nodes: List[DispatchNode] = []
        self.root = self.add_node(name="root")

    def __len__(self) -> int:
        return len(self._nodes)

    def add_node(
        self,
        *,
        name: Optional[str] = None,
        resource_class: Any = None,
        methods: Optional[Iterable[str]] = None,
    ) -> int:
        node_id = len(self._nodes)
        resolved = canonical_methods(methods) if methods is not None else None
        self._nodes.append(
            DispatchNode(
                node_id=node_id,
                name=name,
                resource_class=resource_class,
                methods=resolved,
            )
        )
        return node_id

    def link(self, parent: int, child: int, segment: str = "") -> None:
        """Route *parent* to *child*, consuming *segment* of the path.

        *child* may be added later; dangling edges surface when walked.
        """

        node = self.node(parent)
        if node.is_leaf:
            raise ValueError(f"Leaf node {parent} cannot route to children")
        node.edges.append((segment or "", child))

    def node(self, node_id: int) -> DispatchNode:
        if not isinstance(node_id, int) or not 0 <= node_id < len(self._nodes):
            raise MissingResourceError(node_id)
        return self._nodes[node_id]

    def children(self, node_id: int) -> List[Edge]:
        return list(self.node(node_id).edges)

    def is_leaf(self, node_id: int) -> bool:
        return self.node(node_id).is_leaf

    def resource_class_of(self, node_id: int) -> Any:
        node = self.node(node_id)
        if not node.is_leaf:
            raise MissingResourceError(node_id)
        return node.resource_class

    def supported_methods(self, node_id: int) -> Tuple[str, ...]:
        node = self.node(node_id)
        if node.methods is not None:
            return node.methods
        return methods_of_class(node.resource_class)


__all__ = [
    "DispatchGraph",
    "DispatchNode",
    "HTTP_METHODS",
    "canonical_methods",
    "methods_of_class",
]
