"""Out-of-band documentation attributes for resources and representations.

Decorators in this module record descriptive attributes on the decorated object
without changing its behaviour. The lookup helpers are the read side used by
:class:`apidoc.introspection.extractors.AnnotationExtractor`; an element with no
attributes simply yields an empty mapping.

Example::

    @api(category="bookmarks", description="Bookmarks of a user")
    class BookmarksResource(HTTPEndpoint):
        @api_operation(summary="List bookmarks", response=BookmarkList)
        @api_response(404, "Unknown user", model=Error)
        async def get(self, request):
            ...
"""
from __future__ import annotations

import dataclasses
import inspect
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, TypeVar

T = TypeVar("T")

_ATTR = "__apidoc__"


def _own_store(target: Any) -> Dict[str, Any]:
    """Return the metadata dict stored directly on *target* (never inherited)."""

    try:
        store = vars(target).get(_ATTR)
    except TypeError:
        return {}
    return store if isinstance(store, dict) else {}


def _writable_store(target: Any) -> Dict[str, Any]:
    store = _own_store(target)
    if not store:
        store = {}
        setattr(target, _ATTR, store)
    return store


def _clean(**values: Any) -> Dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


def api(
    *,
    category: Optional[str] = None,
    description: Optional[str] = None,
) -> Callable[[T], T]:
    """Describe a resource class (or function endpoint)."""

    def decorator(target: T) -> T:
        _writable_store(target).setdefault("resource", {}).update(
            _clean(category=category, description=description)
        )
        return target

    return decorator


def api_operation(
    *,
    summary: Optional[str] = None,
    notes: Optional[str] = None,
    nickname: Optional[str] = None,
    response: Any = None,
    body: Any = None,
    produces: Optional[Iterable[str]] = None,
    consumes: Optional[Iterable[str]] = None,
    deprecated: Optional[bool] = None,
) -> Callable[[T], T]:
    """Describe one handler method of a resource."""

    def decorator(target: T) -> T:
        _writable_store(target).setdefault("operation", {}).update(
            _clean(
                summary=summary,
                notes=notes,
                nickname=nickname,
                response=response,
                body=body,
                produces=list(produces) if produces is not None else None,
                consumes=list(consumes) if consumes is not None else None,
                deprecated=deprecated,
            )
        )
        return target

    return decorator


def api_response(code: int, message: str, *, model: Any = None) -> Callable[[T], T]:
    """Declare a response status a handler may return. Stackable."""

    def decorator(target: T) -> T:
        # Decorators apply bottom-up; insert first to keep source order.
        _writable_store(target).setdefault("responses", []).insert(
            0, _clean(code=int(code), message=message, model=model)
        )
        return target

    return decorator


def api_param(
    name: str,
    *,
    location: str = "query",
    type: str = "string",
    required: Optional[bool] = None,
    description: Optional[str] = None,
    allowed_values: Optional[Iterable[Any]] = None,
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
    default: Any = None,
    allow_multiple: Optional[bool] = None,
) -> Callable[[T], T]:
    """Declare a parameter a handler reads. Stackable."""

    def decorator(target: T) -> T:
        _writable_store(target).setdefault("parameters", []).insert(
            0,
            _clean(
                name=name,
                location=location,
                type=type,
                required=required,
                description=description,
                allowed_values=list(allowed_values) if allowed_values is not None else None,
                minimum=minimum,
                maximum=maximum,
                default=default,
                allow_multiple=allow_multiple,
            ),
        )
        return target

    return decorator


def api_model(
    *, name: Optional[str] = None, description: Optional[str] = None
) -> Callable[[T], T]:
    """Describe a representation class."""

    def decorator(target: T) -> T:
        _writable_store(target).setdefault("representation", {}).update(
            _clean(name=name, description=description)
        )
        return target

    return decorator


def api_model_property(name: str, **attributes: Any) -> Callable[[T], T]:
    """Attach attributes to property *name* of a representation class. Stackable."""

    def decorator(target: T) -> T:
        properties = _writable_store(target).setdefault("properties", {})
        properties.setdefault(name, {}).update(_clean(**attributes))
        return target

    return decorator


def hidden(target: T) -> T:
    """Exclude an endpoint from generated documentation."""

    _writable_store(target)["hidden"] = True
    return target


def describe_application(
    application: T,
    *,
    title: Optional[str] = None,
    description: Optional[str] = None,
    terms_of_service: Optional[str] = None,
    contact_name: Optional[str] = None,
    contact_email: Optional[str] = None,
    contact_url: Optional[str] = None,
    license_name: Optional[str] = None,
    license_url: Optional[str] = None,
) -> T:
    """Attach definition-level information to a host application object."""

    _writable_store(application).setdefault("application", {}).update(
        _clean(
            title=title,
            description=description,
            terms_of_service=terms_of_service,
            contact_name=contact_name,
            contact_email=contact_email,
            contact_url=contact_url,
            license_name=license_name,
            license_url=license_url,
        )
    )
    return application


def is_hidden(target: Any) -> bool:
    return bool(_own_store(target).get("hidden"))


def application_metadata(application: Any) -> Dict[str, Any]:
    if application is None:
        return {}
    return dict(_own_store(application).get("application", {}))


def resource_metadata(resource_class: Any) -> Dict[str, Any]:
    return dict(_own_store(resource_class).get("resource", {}))


def handler_for(resource_class: Any, method: str) -> Any:
    """Return the callable serving *method* on *resource_class*.

    Function endpoints serve every method themselves.
    """

    if not inspect.isclass(resource_class):
        return resource_class
    return getattr(resource_class, method.lower(), None)


def operation_metadata(resource_class: Any, method: str) -> Dict[str, Any]:
    handler = handler_for(resource_class, method)
    if handler is None:
        return {}
    store = _own_store(handler)
    payload: Dict[str, Any] = dict(store.get("operation", {}))
    payload["responses"] = [dict(item) for item in store.get("responses", ())]
    payload["parameters"] = [dict(item) for item in store.get("parameters", ())]
    return payload


def representation_metadata(representation_class: Any) -> Dict[str, Any]:
    return dict(_own_store(representation_class).get("representation", {}))


def representation_name(representation: Any) -> str:
    """Name under which a representation class (or literal name) is shared."""

    if isinstance(representation, str):
        return representation
    declared = representation_metadata(representation).get("name")
    return str(declared) if declared else representation.__name__


def property_metadata(representation_class: Any, name: str) -> Dict[str, Any]:
    payload: Dict[str, Any] = {}
    if dataclasses.is_dataclass(representation_class):
        for item in dataclasses.fields(representation_class):
            if item.name == name:
                payload.update(item.metadata.get("apidoc", {}))
                break
    declared: Mapping[str, Mapping[str, Any]] = _own_store(representation_class).get(
        "properties", {}
    )
    payload.update(declared.get(name, {}))
    return payload


def declared_property_names(representation_class: Any) -> List[str]:
    """Names declared only through :func:`api_model_property`."""

    return list(_own_store(representation_class).get("properties", {}))


__all__ = [
    "api",
    "api_model",
    "api_model_property",
    "api_operation",
    "api_param",
    "api_response",
    "application_metadata",
    "declared_property_names",
    "describe_application",
    "handler_for",
    "hidden",
    "is_hidden",
    "operation_metadata",
    "property_metadata",
    "representation_metadata",
    "representation_name",
    "resource_metadata",
]
