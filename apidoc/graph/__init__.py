"""Dispatch graph model, Starlette adapter and walker."""
from __future__ import annotations

from .dispatch import DispatchGraph, DispatchNode, canonical_methods, methods_of_class
from .starlette import graph_from_app
from .walker import ResourceRecord, WalkResult, join_path, walk

__all__ = [
    "DispatchGraph",
    "DispatchNode",
    "ResourceRecord",
    "WalkResult",
    "canonical_methods",
    "graph_from_app",
    "join_path",
    "methods_of_class",
    "walk",
]
