from __future__ import annotations

import datetime
import enum
from dataclasses import dataclass
from typing import Annotated, Dict, List, Literal, Optional

from apidoc import metadata
from apidoc.introspection.extractors import (
    AnnotationExtractor,
    IntrospectionExtractor,
    PropertySource,
    default_extractors,
    describe_type,
    is_representation_class,
)
from apidoc.introspection.model import (
    Definition,
    Operation,
    Property,
    Representation,
    Resource,
    Response,
)


class Color(enum.Enum):
    RED = "red"
    BLUE = "blue"


@dataclass
class Tag:
    label: str


class PlainResource:
    """Things you can list.

    Longer explanation that stays out of the listing.
    """

    def get(self, request):
        """List things.

        Returns every thing the caller may see.
        """

    @metadata.api_operation(summary="Create a thing", response=Tag, body="ThingInput")
    @metadata.api_response(201, "Created", model=Tag)
    def post(self, request):
        """Docstring summary loses to the annotation."""


def test_describe_type_primitives_and_containers() -> None:
    assert describe_type(int).type == "integer"
    assert describe_type(int).format == "int64"
    assert describe_type(datetime.datetime).format == "date-time"
    assert describe_type(Dict[str, int]).type == "object"
    info = describe_type(List[str])
    assert (info.type, info.items) == ("array", "string")


def test_describe_type_optional_literal_and_enum() -> None:
    optional = describe_type(Optional[int])
    assert optional.type == "integer"
    assert optional.optional is True
    assert describe_type(Literal["a", "b"]).allowed_values == ("a", "b")
    assert describe_type(Color).allowed_values == ("red", "blue")
    assert describe_type(Annotated[str, "meta"]).type == "string"


def test_describe_type_nested_representations() -> None:
    single = describe_type(Tag)
    assert (single.type, single.ref, single.nested) == ("Tag", "Tag", (Tag,))
    many = describe_type(List[Tag])
    assert (many.type, many.items, many.nested) == ("array", "Tag", (Tag,))
    assert is_representation_class(Tag)
    assert not is_representation_class(Color)
    assert not is_representation_class(str)


def test_introspection_extractor_reads_docstrings_and_path_parameters() -> None:
    extractor = IntrospectionExtractor()
    resource = Resource(category="things", path="/things/{id:int}")
    extractor.contribute_to_resource(resource, PlainResource)
    assert resource.description == "Things you can list."

    operation = Operation(method="GET", path="/things/{id:int}")
    extractor.contribute_to_operation(resource, operation, PlainResource, PlainResource.get)

    assert operation.name == "getPlainResource"
    assert operation.summary == "List things."
    assert operation.description == "Returns every thing the caller may see."
    (parameter,) = operation.parameters
    assert (parameter.name, parameter.location, parameter.type, parameter.required) == (
        "id",
        "path",
        "integer",
        True,
    )


def test_later_extractor_wins_on_the_same_attribute() -> None:
    resource = Resource(category="things", path="/things")
    operation = Operation(method="POST", path="/things")
    for extractor in default_extractors():
        extractor.contribute_to_operation(resource, operation, PlainResource, PlainResource.post)

    assert operation.summary == "Create a thing"
    assert operation.produced_representations == ["Tag"]
    assert operation.consumed_representations == ["ThingInput"]
    body = [parameter for parameter in operation.parameters if parameter.location == "body"]
    assert body[0].type == "ThingInput"


def test_response_declarations_are_additive() -> None:
    resource = Resource(category="things", path="/things")
    operation = Operation(method="POST", path="/things")

    class Extra(AnnotationExtractor):
        name = "extra"

        def contribute_to_operation(self, resource, operation, resource_class, handler):
            operation.add_response(Response(code=409, message="Conflict"))
            return None

    AnnotationExtractor().contribute_to_operation(
        resource, operation, PlainResource, PlainResource.post
    )
    Extra().contribute_to_operation(resource, operation, PlainResource, PlainResource.post)

    assert sorted(operation.responses) == [201, 409]
    assert operation.responses[201].representation == "Tag"


def test_annotation_extractor_returns_discovered_classes() -> None:
    resource = Resource(category="things", path="/things")
    operation = Operation(method="POST", path="/things")

    discovered = AnnotationExtractor().contribute_to_operation(
        resource, operation, PlainResource, PlainResource.post
    )

    assert list(discovered) == [Tag, Tag]


def test_property_hooks_combine() -> None:
    @metadata.api_model_property("tags", description="Labels", items=Tag)
    @dataclass
    class Item:
        tags: List[str]

    prop = Property(name="tags")
    source = PropertySource(name="tags", annotation=List[str], required=True)
    IntrospectionExtractor().contribute_to_property(prop, Item, source)
    assert (prop.type, prop.items, prop.required) == ("array", "string", True)

    discovered = AnnotationExtractor().contribute_to_property(prop, Item, source)
    assert (prop.items, prop.description) == ("Tag", "Labels")
    assert list(discovered) == [Tag]


def test_definition_information_comes_from_the_application() -> None:
    class App:
        pass

    app = metadata.describe_application(
        App(), title="Things", contact_email="ops@example.com", license_name="MIT"
    )
    definition = Definition()
    AnnotationExtractor().contribute_to_definition(definition, app)

    assert definition.title == "Things"
    assert definition.contact.email == "ops@example.com"
    assert definition.license.name == "MIT"


def test_representation_description_prefers_annotation() -> None:
    @metadata.api_model(description="Annotated")
    @dataclass
    class Thing:
        """Docstring."""

        value: int

    representation = Representation(name="Thing")
    for extractor in default_extractors():
        extractor.contribute_to_representation(representation, Thing)

    assert representation.description == "Annotated"
