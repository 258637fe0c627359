"""Definition model and the extractor chain that builds it."""
from __future__ import annotations

from .engine import IntrospectionReport, Introspector, build_definition, property_sources
from .extractors import (
    AnnotationExtractor,
    Extractor,
    IntrospectionExtractor,
    PropertySource,
    default_extractors,
)
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

__all__ = [
    "AnnotationExtractor",
    "Contact",
    "Definition",
    "Extractor",
    "IntrospectionExtractor",
    "IntrospectionReport",
    "Introspector",
    "License",
    "Operation",
    "Parameter",
    "Property",
    "PropertySource",
    "Representation",
    "Resource",
    "Response",
    "build_definition",
    "default_extractors",
    "property_sources",
]
