"""Render a :class:`Definition` as Swagger 1.2 documents.

Swagger 1.2 splits documentation into a *resource listing* naming every API
category and one *API declaration* per category carrying the operations and
models. Each declaration repeats ``apiVersion`` and ``basePath`` so it can be
consumed on its own. Translation only reads the definition.
"""
from __future__ import annotations

import re
from collections import deque
from typing import Any, Deque, Dict, List, Optional

from ..introspection.model import Definition, Operation, Parameter, Property, Resource
from ..utils.config import DEFAULT_API_VERSION, SWAGGER_VERSION
from ..utils.errors import UnknownCategoryError

Document = Dict[str, Any]

_CONVERTOR = re.compile(r"{([^{}:]+):[^{}]+}")


def public_path(path: str) -> str:
    """Drop routing convertors: ``/files/{name:path}`` becomes ``/files/{name}``."""

    return _CONVERTOR.sub(r"{\1}", path)


def _api_version(definition: Definition) -> str:
    return definition.version or DEFAULT_API_VERSION


def _header(definition: Definition) -> Document:
    document: Document = {
        "swaggerVersion": SWAGGER_VERSION,
        "apiVersion": _api_version(definition),
    }
    if definition.base_path:
        document["basePath"] = definition.base_path
    return document


def _number(value: Any) -> Optional[str]:
    # Swagger 1.2 encodes numeric bounds as strings.
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def _info(definition: Definition) -> Document:
    info: Document = {}
    if definition.title:
        info["title"] = definition.title
    if definition.description:
        info["description"] = definition.description
    if definition.terms_of_service:
        info["termsOfServiceUrl"] = definition.terms_of_service
    contact = definition.contact
    if contact is not None and (contact.email or contact.url or contact.name):
        info["contact"] = contact.email or contact.url or contact.name
    license_ = definition.license
    if license_ is not None:
        if license_.name:
            info["license"] = license_.name
        if license_.url:
            info["licenseUrl"] = license_.url
    return info


def resource_path(resource: Resource) -> str:
    return "/" + resource.category.strip("/")


def to_resource_listing(definition: Definition) -> Document:
    """Return the resource listing enumerating every category."""

    listing = _header(definition)
    apis: List[Document] = []
    for resource in definition.resources:
        entry: Document = {"path": resource_path(resource)}
        if resource.description:
            entry["description"] = resource.description
        apis.append(entry)
    listing["apis"] = apis
    info = _info(definition)
    if info:
        listing["info"] = info
    return listing


def _parameter(parameter: Parameter) -> Document:
    payload: Document = {
        "paramType": parameter.location,
        "name": parameter.name,
        "type": parameter.type,
        "required": bool(parameter.required),
    }
    if parameter.description:
        payload["description"] = parameter.description
    if parameter.allow_multiple:
        payload["allowMultiple"] = True
    if parameter.allowed_values:
        payload["enum"] = [str(value) for value in parameter.allowed_values]
    if parameter.minimum is not None:
        payload["minimum"] = _number(parameter.minimum)
    if parameter.maximum is not None:
        payload["maximum"] = _number(parameter.maximum)
    if parameter.default_value is not None:
        payload["defaultValue"] = str(parameter.default_value)
    return payload


def _nickname(operation: Operation) -> str:
    if operation.name:
        return operation.name
    words = [
        part.strip("{}").split(":")[0]
        for part in operation.path.split("/")
        if part
    ]
    return operation.method.lower() + "".join(word[:1].upper() + word[1:] for word in words)


def _operation(operation: Operation) -> Document:
    payload: Document = {
        "method": operation.method,
        "nickname": _nickname(operation),
    }
    if operation.summary:
        payload["summary"] = operation.summary
    if operation.description:
        payload["notes"] = operation.description
    produced = operation.produced_representations
    payload["type"] = produced[0] if produced else "void"
    payload["parameters"] = [_parameter(parameter) for parameter in operation.parameters]
    if operation.responses:
        messages: List[Document] = []
        for code in sorted(operation.responses):
            response = operation.responses[code]
            message: Document = {"code": response.code, "message": response.message}
            if response.representation:
                message["responseModel"] = response.representation
            messages.append(message)
        payload["responseMessages"] = messages
    if operation.produces:
        payload["produces"] = list(operation.produces)
    if operation.consumes:
        payload["consumes"] = list(operation.consumes)
    if operation.deprecated:
        payload["deprecated"] = "true"
    return payload


def _property(prop: Property, known: Dict[str, Any]) -> Document:
    if prop.ref and prop.type == prop.ref:
        payload: Document = {"$ref": prop.ref}
    elif prop.type == "array":
        items = prop.items or "string"
        payload = {
            "type": "array",
            "items": {"$ref": items} if items in known else {"type": items},
        }
    else:
        payload = {"type": prop.type}
        if prop.format:
            payload["format"] = prop.format
    if prop.description:
        payload["description"] = prop.description
    if prop.allowed_values:
        payload["enum"] = [str(value) for value in prop.allowed_values]
    if prop.minimum is not None:
        payload["minimum"] = _number(prop.minimum)
    if prop.maximum is not None:
        payload["maximum"] = _number(prop.maximum)
    if prop.default_value is not None:
        value = prop.default_value
        payload["defaultValue"] = value if isinstance(value, (str, int, float, bool)) else str(value)
    return payload


def _referenced_models(definition: Definition, resource: Resource) -> List[str]:
    """Names of every representation the category reaches, in discovery order."""

    known = definition.representations
    queue: Deque[str] = deque()
    for operation in resource.operations:
        queue.extend(operation.produced_representations)
        queue.extend(operation.consumed_representations)
        queue.extend(
            response.representation
            for response in operation.responses.values()
            if response.representation
        )
        queue.extend(parameter.type for parameter in operation.parameters)
    ordered: List[str] = []
    seen = set()
    while queue:
        name = queue.popleft()
        if name in seen or name not in known:
            continue
        seen.add(name)
        ordered.append(name)
        for prop in known[name].properties.values():
            if prop.ref:
                queue.append(prop.ref)
            if prop.items:
                queue.append(prop.items)
    return ordered


def _models(definition: Definition, resource: Resource) -> Document:
    known = definition.representations
    models: Document = {}
    for name in _referenced_models(definition, resource):
        representation = known[name]
        model: Document = {"id": representation.name}
        if representation.description:
            model["description"] = representation.description
        required = [prop.name for prop in representation.properties.values() if prop.required]
        if required:
            model["required"] = required
        model["properties"] = {
            prop.name: _property(prop, known)
            for prop in representation.properties.values()
        }
        models[name] = model
    return models


def _union(values: List[List[str]]) -> List[str]:
    merged: List[str] = []
    for group in values:
        for value in group:
            if value not in merged:
                merged.append(value)
    return merged


def to_api_declaration(definition: Definition, category: str) -> Document:
    """Return the API declaration for *category*.

    Raises :class:`UnknownCategoryError` when no resource has that category.
    """

    resource = definition.resource(category)
    if resource is None:
        raise UnknownCategoryError(category)

    by_path: Dict[str, List[Document]] = {path: [] for path in resource.paths}
    for operation in resource.operations:
        by_path.setdefault(operation.path, []).append(_operation(operation))
    apis: List[Document] = []
    for path, operations in by_path.items():
        entry: Document = {"path": public_path(path)}
        if path == resource.path and resource.description:
            entry["description"] = resource.description
        entry["operations"] = operations
        apis.append(entry)

    declaration = _header(definition)
    declaration["resourcePath"] = resource_path(resource)
    produces = _union([operation.produces for operation in resource.operations])
    if produces:
        declaration["produces"] = produces
    consumes = _union([operation.consumes for operation in resource.operations])
    if consumes:
        declaration["consumes"] = consumes
    declaration["apis"] = apis
    declaration["models"] = _models(definition, resource)
    return declaration


__all__ = [
    "Document",
    "public_path",
    "resource_path",
    "to_api_declaration",
    "to_resource_listing",
]
