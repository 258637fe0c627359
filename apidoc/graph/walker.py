"""Depth-first discovery of resources in a dispatch graph."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional, Tuple

from ..utils.errors import CyclicGraphError
from .dispatch import DispatchGraph

logger = logging.getLogger("apidoc.walker")


@dataclass(frozen=True, slots=True)
class ResourceRecord:
    """One resource reachable at one absolute path."""

    path: str
    resource_class: Any
    methods: Tuple[str, ...]
    node_id: int


@dataclass(slots=True)
class WalkResult:
    records: List[ResourceRecord] = field(default_factory=list)
    errors: List[CyclicGraphError] = field(default_factory=list)

    def __iter__(self) -> Iterator[ResourceRecord]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    @property
    def paths(self) -> List[str]:
        return [record.path for record in self.records]


def join_path(prefix: str, segment: str) -> str:
    """Append a route *segment* to an accumulated *prefix*."""

    if not segment:
        return prefix
    if not prefix:
        return segment if segment.startswith("/") else "/" + segment
    tail = segment.lstrip("/")
    if not tail:
        return prefix
    return prefix.rstrip("/") + "/" + tail


def walk(
    graph: DispatchGraph, root: Optional[int] = None, base_path: str = ""
) -> WalkResult:
    """Collect every (path, resource, methods) record reachable from *root*.

    Each stack frame carries its own ancestor chain, so a node may be reached
    through several prefixes but never re-entered below itself. A cyclic edge
    is reported in :attr:`WalkResult.errors` and only that branch is dropped.
    """

    start = graph.root if root is None else root
    result = WalkResult()
    stack: List[Tuple[int, str, Tuple[int, ...]]] = [(start, base_path, (start,))]
    while stack:
        node_id, prefix, ancestors = stack.pop()
        if graph.is_leaf(node_id):
            result.records.append(
                ResourceRecord(
                    path=prefix or "/",
                    resource_class=graph.resource_class_of(node_id),
                    methods=graph.supported_methods(node_id),
                    node_id=node_id,
                )
            )
            continue
        pending: List[Tuple[int, str, Tuple[int, ...]]] = []
        for segment, child in graph.children(node_id):
            path = join_path(prefix, segment)
            if child in ancestors:
                error = CyclicGraphError((*ancestors, child), path)
                logger.warning("walk.cycle", extra={"prefix": path, "chain": error.chain})
                result.errors.append(error)
                continue
            pending.append((child, path, (*ancestors, child)))
        stack.extend(reversed(pending))
    logger.debug(
        "walk.complete",
        extra={"records": len(result.records), "cycles": len(result.errors)},
    )
    return result


__all__ = ["ResourceRecord", "WalkResult", "join_path", "walk"]
