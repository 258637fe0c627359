from __future__ import annotations

from dataclasses import dataclass, field

from apidoc import metadata


@metadata.api(category="widgets", description="Widget store")
class WidgetResource:
    @metadata.api_operation(summary="Fetch a widget", nickname="fetchWidget")
    @metadata.api_response(200, "OK")
    @metadata.api_response(404, "Missing")
    @metadata.api_param("verbose", type="boolean")
    @metadata.api_param("fields", allow_multiple=True)
    def get(self, request):
        return None


class DerivedResource(WidgetResource):
    pass


@metadata.api_model_property("size", description="Widget size", minimum=1)
@metadata.api_model(name="WidgetModel")
@dataclass
class Widget:
    size: int = field(default=0, metadata={"apidoc": {"description": "from field", "maximum": 9}})


def test_resource_metadata_is_not_inherited() -> None:
    assert metadata.resource_metadata(WidgetResource) == {
        "category": "widgets",
        "description": "Widget store",
    }
    assert metadata.resource_metadata(DerivedResource) == {}


def test_operation_metadata_keeps_source_order() -> None:
    info = metadata.operation_metadata(WidgetResource, "GET")

    assert info["summary"] == "Fetch a widget"
    assert info["nickname"] == "fetchWidget"
    assert [item["code"] for item in info["responses"]] == [200, 404]
    assert [item["name"] for item in info["parameters"]] == ["verbose", "fields"]
    assert info["parameters"][1]["allow_multiple"] is True


def test_operation_metadata_for_missing_handler_is_empty() -> None:
    assert metadata.operation_metadata(WidgetResource, "POST") == {}


def test_function_endpoint_is_its_own_handler() -> None:
    def endpoint(request):
        return None

    assert metadata.handler_for(endpoint, "GET") is endpoint


def test_representation_name_prefers_declared_name() -> None:
    assert metadata.representation_name(Widget) == "WidgetModel"
    assert metadata.representation_name("Literal") == "Literal"
    assert metadata.representation_name(WidgetResource) == "WidgetResource"


def test_property_metadata_merges_field_and_decorator() -> None:
    info = metadata.property_metadata(Widget, "size")

    assert info == {"description": "Widget size", "maximum": 9, "minimum": 1}
    assert metadata.declared_property_names(Widget) == ["size"]


def test_hidden_and_application_metadata() -> None:
    class App:
        pass

    app = metadata.describe_application(App(), title="Widgets", license_name="MIT")
    assert metadata.application_metadata(app) == {"title": "Widgets", "license_name": "MIT"}
    assert metadata.application_metadata(None) == {}

    def endpoint(request):
        return None

    assert not metadata.is_hidden(endpoint)
    assert metadata.is_hidden(metadata.hidden(endpoint))
