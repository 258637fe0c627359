"""Pluggable contributors that enrich the definition model.

Every extractor sees each element of the API once, in registration order, and
may mutate the model node it is handed. Operation and property hooks can return
representation classes they came across; the engine queues those for their own
representation and property pass.
"""
from __future__ import annotations

import dataclasses
import datetime as _dt
import decimal
import enum
import inspect
import re
import types
import typing
import uuid
from collections import abc
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple

from .. import metadata
from .model import (
    Contact,
    Definition,
    License,
    Operation,
    Parameter,
    Property,
    Representation,
    Resource,
    Response,
)

Discovered = Optional[Iterable[Any]]


@dataclass(frozen=True, slots=True)
class PropertySource:
    """Raw description of one property of a representation class."""

    name: str
    annotation: Any = None
    required: bool = False
    read_only: bool = False


class Extractor:
    """Base class with no-op hooks; subclasses override what they support."""

    name = "extractor"

    def contribute_to_definition(self, definition: Definition, application: Any) -> None:
        return None

    def contribute_to_resource(self, resource: Resource, resource_class: Any) -> None:
        return None

    def contribute_to_operation(
        self,
        resource: Resource,
        operation: Operation,
        resource_class: Any,
        handler: Any,
    ) -> Discovered:
        return None

    def contribute_to_representation(
        self, representation: Representation, representation_class: Any
    ) -> None:
        return None

    def contribute_to_property(
        self, prop: Property, representation_class: Any, source: PropertySource
    ) -> Discovered:
        return None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


_PRIMITIVES = {
    str: ("string", None),
    int: ("integer", "int64"),
    float: ("number", "double"),
    bool: ("boolean", None),
    bytes: ("string", "byte"),
    decimal.Decimal: ("number", None),
    _dt.datetime: ("string", "date-time"),
    _dt.date: ("string", "date"),
    uuid.UUID: ("string", "uuid"),
}

_PATH_CONVERTORS = {
    "str": ("string", None),
    "path": ("string", None),
    "int": ("integer", "int64"),
    "float": ("number", "double"),
    "uuid": ("string", "uuid"),
}

_PATH_PARAM = re.compile(r"{([a-zA-Z_][a-zA-Z0-9_]*)(?::([a-zA-Z_][a-zA-Z0-9_]*))?}")


def is_representation_class(candidate: Any) -> bool:
    if not inspect.isclass(candidate) or candidate in _PRIMITIVES:
        return False
    if issubclass(candidate, (enum.Enum, str, bytes, int, float)):
        return False
    if dataclasses.is_dataclass(candidate):
        return True
    return bool(getattr(candidate, "__annotations__", None))


@dataclass(slots=True)
class TypeInfo:
    type: str = "string"
    format: Optional[str] = None
    items: Optional[str] = None
    ref: Optional[str] = None
    optional: bool = False
    allowed_values: Tuple[Any, ...] = ()
    nested: Tuple[Any, ...] = ()


def describe_type(annotation: Any) -> TypeInfo:
    """Map a Python type hint onto a schema type."""

    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)
    if origin is typing.Annotated:
        return describe_type(args[0])
    if origin is typing.Union or origin is getattr(types, "UnionType", None):
        members = [arg for arg in args if arg is not type(None)]
        info = describe_type(members[0]) if len(members) == 1 else TypeInfo()
        info.optional = info.optional or len(members) < len(args)
        return info
    if origin is typing.Literal:
        return TypeInfo(type="string", allowed_values=tuple(args))
    if origin in (list, set, frozenset, tuple) or (
        inspect.isclass(origin) and issubclass(origin, abc.Sequence)
        and not issubclass(origin, (str, bytes))
    ):
        inner = describe_type(args[0]) if args else TypeInfo()
        return TypeInfo(
            type="array",
            items=inner.ref or inner.type,
            nested=inner.nested,
        )
    if origin is dict or annotation is dict or (
        inspect.isclass(origin) and issubclass(origin, abc.Mapping)
    ):
        return TypeInfo(type="object")
    if annotation in (list, set, tuple, frozenset):
        return TypeInfo(type="array", items="string")
    if annotation in _PRIMITIVES:
        kind, fmt = _PRIMITIVES[annotation]
        return TypeInfo(type=kind, format=fmt)
    if inspect.isclass(annotation) and issubclass(annotation, enum.Enum):
        return TypeInfo(
            type="string", allowed_values=tuple(member.value for member in annotation)
        )
    if is_representation_class(annotation):
        return TypeInfo(
            type=metadata.representation_name(annotation),
            ref=metadata.representation_name(annotation),
            nested=(annotation,),
        )
    return TypeInfo()


def _doc_lines(target: Any) -> Tuple[Optional[str], Optional[str]]:
    raw = getattr(target, "__doc__", None) if target is not None else None
    if not isinstance(raw, str) or not raw.strip():
        return None, None
    doc = inspect.cleandoc(raw)
    # dataclasses synthesise ``Name(field: type, ...)`` when no docstring exists.
    if inspect.isclass(target) and doc.startswith(f"{target.__name__}("):
        return None, None
    head, _, tail = doc.partition("\n")
    return head.strip() or None, tail.strip() or None


def _nickname(method: str, resource_class: Any) -> str:
    if not inspect.isclass(resource_class):
        return resource_class.__name__
    return f"{method.lower()}{resource_class.__name__}"


class IntrospectionExtractor(Extractor):
    """Describes elements from Python itself: docstrings, paths and type hints."""

    name = "introspection"

    def contribute_to_resource(self, resource: Resource, resource_class: Any) -> None:
        summary, _ = _doc_lines(resource_class)
        if summary:
            resource.description = summary

    def contribute_to_operation(
        self,
        resource: Resource,
        operation: Operation,
        resource_class: Any,
        handler: Any,
    ) -> Discovered:
        operation.name = _nickname(operation.method, resource_class)
        summary, notes = _doc_lines(handler)
        if summary:
            operation.summary = summary
        if notes:
            operation.description = notes
        for match in _PATH_PARAM.finditer(operation.path):
            kind, _ = _PATH_CONVERTORS.get(match.group(2) or "str", ("string", None))
            parameter = operation.add_parameter(Parameter(name=match.group(1), location="path"))
            parameter.type = kind
            parameter.required = True
        return None

    def contribute_to_representation(
        self, representation: Representation, representation_class: Any
    ) -> None:
        summary, _ = _doc_lines(representation_class)
        if summary:
            representation.description = summary

    def contribute_to_property(
        self, prop: Property, representation_class: Any, source: PropertySource
    ) -> Discovered:
        if source.annotation is None:
            return None
        info = describe_type(source.annotation)
        prop.type = info.type
        prop.format = info.format
        prop.items = info.items
        prop.ref = info.ref
        prop.required = source.required and not info.optional
        if info.allowed_values:
            prop.allowed_values = list(info.allowed_values)
        return info.nested


def _model_reference(model: Any) -> Tuple[str, List[Any]]:
    name = metadata.representation_name(model)
    return name, ([] if isinstance(model, str) else [model])


class AnnotationExtractor(Extractor):
    """Applies attributes recorded with the :mod:`apidoc.metadata` decorators."""

    name = "annotations"

    def contribute_to_definition(self, definition: Definition, application: Any) -> None:
        info = metadata.application_metadata(application)
        if not info:
            return
        definition.title = info.get("title", definition.title)
        definition.description = info.get("description", definition.description)
        definition.terms_of_service = info.get(
            "terms_of_service", definition.terms_of_service
        )
        if any(key in info for key in ("contact_name", "contact_email", "contact_url")):
            definition.contact = Contact(
                name=info.get("contact_name"),
                email=info.get("contact_email"),
                url=info.get("contact_url"),
            )
        if "license_name" in info or "license_url" in info:
            definition.license = License(
                name=info.get("license_name"), url=info.get("license_url")
            )

    def contribute_to_resource(self, resource: Resource, resource_class: Any) -> None:
        info = metadata.resource_metadata(resource_class)
        if "category" in info:
            resource.category = str(info["category"])
        if "description" in info:
            resource.description = info["description"]

    def contribute_to_operation(
        self,
        resource: Resource,
        operation: Operation,
        resource_class: Any,
        handler: Any,
    ) -> Discovered:
        info = metadata.operation_metadata(resource_class, operation.method)
        discovered: List[Any] = []
        if "summary" in info:
            operation.summary = info["summary"]
        if "notes" in info:
            operation.description = info["notes"]
        if "nickname" in info:
            operation.name = info["nickname"]
        if "deprecated" in info:
            operation.deprecated = bool(info["deprecated"])
        for media_type in info.get("produces", ()):
            if media_type not in operation.produces:
                operation.produces.append(media_type)
        for media_type in info.get("consumes", ()):
            if media_type not in operation.consumes:
                operation.consumes.append(media_type)
        if "response" in info:
            name, classes = _model_reference(info["response"])
            operation.produce(name)
            discovered.extend(classes)
        if "body" in info:
            name, classes = _model_reference(info["body"])
            operation.consume(name)
            body = operation.add_parameter(Parameter(name="body", location="body"))
            body.type = name
            body.required = True
            discovered.extend(classes)
        for entry in info.get("responses", ()):
            model = entry.get("model")
            model_name = None
            if model is not None:
                model_name, classes = _model_reference(model)
                discovered.extend(classes)
            operation.add_response(
                Response(
                    code=int(entry["code"]),
                    message=str(entry.get("message", "")),
                    representation=model_name,
                )
            )
        for entry in info.get("parameters", ()):
            parameter = operation.add_parameter(
                Parameter(name=entry["name"], location=entry.get("location", "query"))
            )
            _apply_parameter(parameter, entry)
        return discovered

    def contribute_to_representation(
        self, representation: Representation, representation_class: Any
    ) -> None:
        info = metadata.representation_metadata(representation_class)
        if "description" in info:
            representation.description = info["description"]

    def contribute_to_property(
        self, prop: Property, representation_class: Any, source: PropertySource
    ) -> Discovered:
        info = metadata.property_metadata(representation_class, prop.name)
        discovered: List[Any] = []
        for key in ("type", "format", "description", "minimum", "maximum"):
            if key in info:
                setattr(prop, key, info[key])
        if "required" in info:
            prop.required = bool(info["required"])
        if "allowed_values" in info:
            prop.allowed_values = list(info["allowed_values"])
        if "default" in info:
            prop.default_value = info["default"]
        if "model" in info:
            name, classes = _model_reference(info["model"])
            prop.type = name
            prop.ref = name
            discovered.extend(classes)
        if "items" in info:
            items = info["items"]
            if isinstance(items, str):
                prop.items = items
            else:
                prop.items, classes = _model_reference(items)
                discovered.extend(classes)
            prop.type = "array"
        return discovered


def _apply_parameter(parameter: Parameter, entry: dict) -> None:
    parameter.type = entry.get("type", parameter.type)
    if "required" in entry:
        parameter.required = bool(entry["required"])
    elif parameter.location == "path":
        parameter.required = True
    if "description" in entry:
        parameter.description = entry["description"]
    if "allowed_values" in entry:
        parameter.allowed_values = list(entry["allowed_values"])
    if "minimum" in entry:
        parameter.minimum = entry["minimum"]
    if "maximum" in entry:
        parameter.maximum = entry["maximum"]
    if "default" in entry:
        parameter.default_value = entry["default"]
    if "allow_multiple" in entry:
        parameter.allow_multiple = bool(entry["allow_multiple"])


def default_extractors() -> List[Extractor]:
    return [IntrospectionExtractor(), AnnotationExtractor()]


__all__ = [
    "AnnotationExtractor",
    "Extractor",
    "IntrospectionExtractor",
    "PropertySource",
    "TypeInfo",
    "default_extractors",
    "describe_type",
    "is_representation_class",
]
