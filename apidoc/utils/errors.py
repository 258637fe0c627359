"""Error codes, envelopes and the introspection exception taxonomy."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Mapping, MutableMapping, Optional, Sequence


class ErrorCode(str, Enum):
    """Stable error codes returned by the documentation routes."""

    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    INTROSPECTION_FAILED = "INTROSPECTION_FAILED"
    INTERNAL = "INTERNAL"


@dataclass(frozen=True)
class ErrorTemplate:
    """Default status, message, and recovery hints for an error code."""

    status: int
    message: str
    recovery: Sequence[str] = ()


_TEMPLATES: Mapping[ErrorCode, ErrorTemplate] = {
    ErrorCode.NOT_FOUND: ErrorTemplate(
        status=404,
        message="No documentation exists for the requested resource.",
        recovery=(
            "List the available categories from the resource listing.",
        ),
    ),
    ErrorCode.METHOD_NOT_ALLOWED: ErrorTemplate(
        status=405,
        message="Documentation is read-only.",
        recovery=(
            "Use GET to fetch documentation documents.",
        ),
    ),
    ErrorCode.INTROSPECTION_FAILED: ErrorTemplate(
        status=500,
        message="The API definition could not be computed.",
        recovery=(
            "Check the server logs for the failing route and retry.",
        ),
    ),
    ErrorCode.INTERNAL: ErrorTemplate(
        status=500,
        message="Internal server error.",
        recovery=(
            "Retry the request or contact support with request logs.",
        ),
    ),
}


def _resolve_template(code: ErrorCode) -> ErrorTemplate:
    try:
        return _TEMPLATES[code]
    except KeyError:  # pragma: no cover - defensive guard
        raise ValueError(f"No error template registered for {code!s}") from None


def make_error(
    code: ErrorCode,
    message: Optional[str] = None,
    *,
    recovery: Optional[Iterable[str]] = None,
    status: Optional[int] = None,
) -> Dict[str, object]:
    """Create a JSON-serialisable error dict."""

    template = _resolve_template(code)
    resolved_message = message if message is not None else template.message
    resolved_status = status if status is not None else template.status
    resolved_recovery: List[str] = list(recovery) if recovery is not None else list(
        template.recovery
    )
    payload: MutableMapping[str, object] = {
        "status": int(resolved_status),
        "code": code.value,
        "message": resolved_message,
        "recovery": resolved_recovery,
    }
    return dict(payload)


class IntrospectionError(RuntimeError):
    """Base class for failures raised while documenting an application."""


class CyclicGraphError(IntrospectionError):
    """A dispatch node recurs within its own ancestor chain."""

    def __init__(self, chain: Sequence[int], prefix: str):
        self.chain = tuple(chain)
        self.prefix = prefix
        rendered = " -> ".join(str(node) for node in self.chain)
        super().__init__(f"Cyclic dispatch graph under '{prefix or '/'}': {rendered}")


class MissingResourceError(IntrospectionError):
    """A dispatch edge references a node that does not exist."""

    def __init__(self, node_id: object):
        self.node_id = node_id
        super().__init__(f"Dispatch graph has no node {node_id!r}")


class UnknownCategoryError(IntrospectionError, LookupError):
    """A detail document was requested for a category that is not documented."""

    def __init__(self, category: str):
        self.category = category
        super().__init__(f"Unknown API category '{category}'")


@dataclass(frozen=True)
class ExtractorFailure:
    """Diagnostic record for one extractor failing on one element."""

    extractor: str
    stage: str
    element: str
    error: BaseException

    def describe(self) -> str:
        return f"{self.extractor}.{self.stage}({self.element}): {self.error!r}"


__all__ = [
    "CyclicGraphError",
    "ErrorCode",
    "ErrorTemplate",
    "ExtractorFailure",
    "IntrospectionError",
    "MissingResourceError",
    "UnknownCategoryError",
    "make_error",
]
