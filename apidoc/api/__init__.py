"""HTTP surface serving the generated documentation."""
from __future__ import annotations

from .endpoint import SwaggerSpecificationEndpoint

__all__ = ["SwaggerSpecificationEndpoint"]
