"""Swagger 1.2 rendering of the definition model."""
from __future__ import annotations

from .translator import (
    Document,
    public_path,
    resource_path,
    to_api_declaration,
    to_resource_listing,
)

__all__ = [
    "Document",
    "public_path",
    "resource_path",
    "to_api_declaration",
    "to_resource_listing",
]
