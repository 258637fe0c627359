"""Format-neutral description of an HTTP API."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(slots=True)
class Contact:
    name: Optional[str] = None
    email: Optional[str] = None
    url: Optional[str] = None


@dataclass(slots=True)
class License:
    name: Optional[str] = None
    url: Optional[str] = None


@dataclass(slots=True)
class Property:
    """Leaf schema node of a representation."""

    name: str
    type: str = "string"
    format: Optional[str] = None
    items: Optional[str] = None
    ref: Optional[str] = None
    required: bool = False
    description: Optional[str] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    allowed_values: List[Any] = field(default_factory=list)
    default_value: Any = None


@dataclass(slots=True)
class Representation:
    """A named payload schema shared by every operation that references it."""

    name: str
    description: Optional[str] = None
    properties: Dict[str, Property] = field(default_factory=dict)

    def add_property(self, prop: Property) -> Property:
        """Insert *prop*, or return the existing property with the same name."""

        existing = self.properties.get(prop.name)
        if existing is not None:
            return existing
        self.properties[prop.name] = prop
        return prop

    def ensure_property(self, name: str) -> Property:
        return self.add_property(Property(name=name))


@dataclass(slots=True)
class Parameter:
    name: str
    location: str = "query"
    type: str = "string"
    required: bool = False
    description: Optional[str] = None
    allow_multiple: bool = False
    allowed_values: List[Any] = field(default_factory=list)
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    default_value: Any = None


@dataclass(slots=True)
class Response:
    code: int
    message: str = ""
    representation: Optional[str] = None


@dataclass(slots=True)
class Operation:
    """One HTTP method exposed at one path of a resource."""

    method: str
    path: str
    name: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    parameters: List[Parameter] = field(default_factory=list)
    responses: Dict[int, Response] = field(default_factory=dict)
    produces: List[str] = field(default_factory=list)
    consumes: List[str] = field(default_factory=list)
    produced_representations: List[str] = field(default_factory=list)
    consumed_representations: List[str] = field(default_factory=list)
    deprecated: bool = False

    def add_parameter(self, parameter: Parameter) -> Parameter:
        """Insert *parameter*, or return the existing one with the same name and location."""

        for existing in self.parameters:
            if existing.name == parameter.name and existing.location == parameter.location:
                return existing
        self.parameters.append(parameter)
        return parameter

    def add_response(self, response: Response) -> Response:
        """Merge *response* by status code; later writes update the entry."""

        existing = self.responses.get(response.code)
        if existing is None:
            self.responses[response.code] = response
            return response
        if response.message:
            existing.message = response.message
        if response.representation is not None:
            existing.representation = response.representation
        return existing

    def produce(self, representation: str) -> None:
        if representation not in self.produced_representations:
            self.produced_representations.append(representation)

    def consume(self, representation: str) -> None:
        if representation not in self.consumed_representations:
            self.consumed_representations.append(representation)


@dataclass(slots=True)
class Resource:
    """One API category and every operation documented under it."""

    category: str
    path: str
    description: Optional[str] = None
    paths: List[str] = field(default_factory=list)
    operations: List[Operation] = field(default_factory=list)
    # (path, method, resource class) triples discovered for this category.
    bindings: List[Tuple[str, str, Any]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.path not in self.paths:
            self.paths.insert(0, self.path)

    def add_path(self, path: str) -> None:
        if path not in self.paths:
            self.paths.append(path)

    def operation(self, path: str, method: str) -> Optional[Operation]:
        for operation in self.operations:
            if operation.path == path and operation.method == method:
                return operation
        return None


@dataclass(slots=True)
class Definition:
    """Root aggregate built once per documentation endpoint."""

    version: Optional[str] = None
    base_path: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    terms_of_service: Optional[str] = None
    contact: Optional[Contact] = None
    license: Optional[License] = None
    resources: List[Resource] = field(default_factory=list)
    representations: Dict[str, Representation] = field(default_factory=dict)

    def resource(self, category: str) -> Optional[Resource]:
        for resource in self.resources:
            if resource.category == category:
                return resource
        return None

    def representation(self, name: str) -> Representation:
        """Return the shared representation called *name*, creating it once."""

        existing = self.representations.get(name)
        if existing is None:
            existing = Representation(name=name)
            self.representations[name] = existing
        return existing

    @property
    def categories(self) -> List[str]:
        return [resource.category for resource in self.resources]


__all__ = [
    "Contact",
    "Definition",
    "License",
    "Operation",
    "Parameter",
    "Property",
    "Representation",
    "Resource",
    "Response",
]
