"""JSON schema validation of the generated Swagger documents."""
from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from typing import Any, Dict, List, Tuple

from jsonschema import Draft202012Validator
from referencing import Registry, Resource

RESOURCE_LISTING_SCHEMA = "resource_listing.v1_2.json"
API_DECLARATION_SCHEMA = "api_declaration.v1_2.json"


@lru_cache(maxsize=None)
def _schema_contents(name: str) -> Dict[str, Any]:
    with resources.files("apidoc.api.schemas").joinpath(name).open("r", encoding="utf-8") as handle:
        return json.load(handle)


@lru_cache(maxsize=1)
def _registry() -> Registry:
    registry = Registry()
    package = resources.files("apidoc.api.schemas")
    for entry in package.iterdir():
        if entry.name.endswith(".json"):
            contents = _schema_contents(entry.name)
            schema_id = contents.get("$id")
            if schema_id:
                registry = registry.with_resource(schema_id, Resource.from_contents(contents))
    return registry


@lru_cache(maxsize=None)
def _load_schema(name: str) -> Draft202012Validator:
    schema = _schema_contents(name)
    return Draft202012Validator(schema, registry=_registry())


def validate_payload(schema_name: str, payload: Dict[str, Any]) -> Tuple[bool, List[str]]:
    validator = _load_schema(schema_name)
    errors: List[str] = []
    for error in validator.iter_errors(payload):
        location = "/".join(str(part) for part in error.absolute_path)
        errors.append(f"{location}: {error.message}" if location else error.message)
    return not errors, errors


def validate_resource_listing(payload: Dict[str, Any]) -> Tuple[bool, List[str]]:
    return validate_payload(RESOURCE_LISTING_SCHEMA, payload)


def validate_api_declaration(payload: Dict[str, Any]) -> Tuple[bool, List[str]]:
    return validate_payload(API_DECLARATION_SCHEMA, payload)


__all__ = [
    "API_DECLARATION_SCHEMA",
    "RESOURCE_LISTING_SCHEMA",
    "validate_api_declaration",
    "validate_payload",
    "validate_resource_listing",
]
