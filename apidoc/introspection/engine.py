"""Sequencing of the extractor chain over a walked dispatch graph."""
from __future__ import annotations

import copy
import dataclasses
import inspect
import logging
import typing
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Deque, Dict, Iterable, List, Optional, Sequence, Set

from .. import metadata
from ..graph.dispatch import DispatchGraph
from ..graph.walker import ResourceRecord, WalkResult, walk
from ..utils.config import DEFAULT_API_VERSION
from ..utils.errors import CyclicGraphError, ExtractorFailure
from ..utils.logging import scoped_timer
from .extractors import Extractor, PropertySource, default_extractors
from .model import Definition, Operation, Property, Representation, Resource

logger = logging.getLogger("apidoc.introspection")

Walker = Callable[..., WalkResult]


@dataclass(slots=True)
class IntrospectionReport:
    """A definition together with everything that went wrong building it."""

    definition: Definition
    cyclic_errors: List[CyclicGraphError] = field(default_factory=list)
    failures: List[ExtractorFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.cyclic_errors and not self.failures


def default_category(record: ResourceRecord) -> str:
    """First literal path segment, else the lower-cased resource name."""

    for segment in record.path.split("/"):
        if segment and not segment.startswith("{"):
            return segment
    return getattr(record.resource_class, "__name__", "root").lower()


def _type_hints(target: Any) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(target)
    except (NameError, TypeError) as exc:
        logger.debug(
            "introspection.unresolved_hints",
            extra={"target": repr(target), "error": str(exc)},
        )
        return dict(getattr(target, "__annotations__", {}) or {})


def property_sources(representation_class: Any) -> List[PropertySource]:
    """Enumerate the properties a representation class exposes, in order."""

    if not inspect.isclass(representation_class):
        return []
    hints = _type_hints(representation_class)
    sources: List[PropertySource] = []
    seen: Set[str] = set()
    if dataclasses.is_dataclass(representation_class):
        for item in dataclasses.fields(representation_class):
            has_default = (
                item.default is not dataclasses.MISSING
                or item.default_factory is not dataclasses.MISSING
            )
            sources.append(
                PropertySource(
                    name=item.name,
                    annotation=hints.get(item.name, item.type),
                    required=not has_default,
                )
            )
            seen.add(item.name)
    else:
        required_keys = getattr(representation_class, "__required_keys__", None)
        for name, annotation in hints.items():
            if name.startswith("_") or typing.get_origin(annotation) is typing.ClassVar:
                continue
            if required_keys is not None:
                required = name in required_keys
            else:
                required = not hasattr(representation_class, name)
            sources.append(PropertySource(name=name, annotation=annotation, required=required))
            seen.add(name)
    for name, member in inspect.getmembers(representation_class):
        if name in seen or name.startswith("_") or not isinstance(member, property):
            continue
        annotation = _type_hints(member.fget).get("return") if member.fget else None
        seen.add(name)
        sources.append(
            PropertySource(name=name, annotation=annotation, read_only=member.fset is None)
        )
    for name in metadata.declared_property_names(representation_class):
        if name not in seen:
            sources.append(PropertySource(name=name))
            seen.add(name)
    return sources


def _restore(element: Any, snapshot: Any) -> None:
    for item in dataclasses.fields(element):
        setattr(element, item.name, getattr(snapshot, item.name))


def _describe(element: Any) -> str:
    if isinstance(element, (Resource, Representation)):
        return getattr(element, "category", None) or getattr(element, "name")
    if isinstance(element, Operation):
        return f"{element.method} {element.path}"
    if isinstance(element, Property):
        return element.name
    return type(element).__name__


class Introspector:
    """Build a :class:`Definition` by running extractors over a dispatch graph."""

    def __init__(
        self,
        extractors: Optional[Sequence[Extractor]] = None,
        *,
        walker: Walker = walk,
    ) -> None:
        self.extractors: List[Extractor] = (
            list(extractors) if extractors is not None else default_extractors()
        )
        self._walker = walker

    def _invoke(
        self,
        report: IntrospectionReport,
        stage: str,
        element: Any,
        call: Callable[[Extractor], Any],
    ) -> List[Any]:
        """Run *call* for every extractor, isolating failures per extractor.

        A failing extractor leaves *element* as it found it.
        """

        discovered: List[Any] = []
        for extractor in self.extractors:
            snapshot = copy.deepcopy(element)
            try:
                result = call(extractor)
            except Exception as exc:
                _restore(element, snapshot)
                failure = ExtractorFailure(
                    extractor=extractor.name,
                    stage=stage,
                    element=_describe(element),
                    error=exc,
                )
                logger.warning(
                    "introspection.extractor_failed",
                    exc_info=exc,
                    extra={
                        "extractor": failure.extractor,
                        "stage": stage,
                        "element": failure.element,
                    },
                )
                report.failures.append(failure)
                continue
            if result:
                discovered.extend(result)
        return discovered

    def build(
        self,
        graph: DispatchGraph,
        *,
        base_path: Optional[str] = None,
        api_version: Optional[str] = None,
    ) -> IntrospectionReport:
        definition = Definition(version=api_version, base_path=base_path)
        report = IntrospectionReport(definition=definition)
        with scoped_timer(logger, "introspection.build"):
            self._invoke(
                report,
                "definition",
                definition,
                lambda ext: ext.contribute_to_definition(definition, graph.application),
            )
            walked = self._walker(graph, graph.root, "")
            report.cyclic_errors.extend(walked.errors)
            for error in walked.errors:
                logger.warning("introspection.cyclic_branch", extra={"error": str(error)})

            self._collect_resources(report, walked.records)
            queue: Deque[Any] = deque()
            for resource in definition.resources:
                queue.extend(self._collect_operations(report, resource))
            self._collect_representations(report, queue)

        if definition.version is None:
            definition.version = DEFAULT_API_VERSION
        if report.failures:
            logger.warning(
                "introspection.extractor_failures",
                extra={
                    "count": len(report.failures),
                    "failures": [failure.describe() for failure in report.failures],
                },
            )
        logger.info(
            "introspection.complete",
            extra={
                "resources": len(definition.resources),
                "representations": len(definition.representations),
                "cycles": len(report.cyclic_errors),
                "failures": len(report.failures),
            },
        )
        return report

    def _collect_resources(
        self, report: IntrospectionReport, records: Iterable[ResourceRecord]
    ) -> None:
        definition = report.definition
        for record in records:
            candidate = Resource(category=default_category(record), path=record.path)
            self._invoke(
                report,
                "resource",
                candidate,
                lambda ext: ext.contribute_to_resource(candidate, record.resource_class),
            )
            resource = definition.resource(candidate.category)
            if resource is None:
                resource = candidate
                definition.resources.append(resource)
            else:
                resource.add_path(record.path)
                if resource.description is None:
                    resource.description = candidate.description
            for method in record.methods:
                resource.bindings.append((record.path, method, record.resource_class))

    def _collect_operations(
        self, report: IntrospectionReport, resource: Resource
    ) -> List[Any]:
        discovered: List[Any] = []
        for path, method, resource_class in resource.bindings:
            if resource.operation(path, method) is not None:
                continue
            operation = Operation(method=method, path=path)
            handler = metadata.handler_for(resource_class, method)
            discovered.extend(
                self._invoke(
                    report,
                    "operation",
                    operation,
                    lambda ext: ext.contribute_to_operation(
                        resource, operation, resource_class, handler
                    ),
                )
            )
            resource.operations.append(operation)
        return discovered

    def _collect_representations(
        self, report: IntrospectionReport, queue: Deque[Any]
    ) -> None:
        definition = report.definition
        # The first class surfaced under a name defines that representation.
        processed: Set[str] = set()
        while queue:
            representation_class = queue.popleft()
            name = metadata.representation_name(representation_class)
            if name in processed:
                continue
            processed.add(name)
            representation = definition.representation(name)
            self._invoke(
                report,
                "representation",
                representation,
                lambda ext: ext.contribute_to_representation(
                    representation, representation_class
                ),
            )
            for source in property_sources(representation_class):
                prop = representation.ensure_property(source.name)
                queue.extend(
                    self._invoke(
                        report,
                        "property",
                        prop,
                        lambda ext: ext.contribute_to_property(
                            prop, representation_class, source
                        ),
                    )
                )


def build_definition(
    graph: DispatchGraph,
    *,
    base_path: Optional[str] = None,
    api_version: Optional[str] = None,
    extractors: Optional[Sequence[Extractor]] = None,
) -> IntrospectionReport:
    """Convenience wrapper around :meth:`Introspector.build`."""

    return Introspector(extractors).build(
        graph, base_path=base_path, api_version=api_version
    )


__all__ = [
    "IntrospectionReport",
    "Introspector",
    "build_definition",
    "default_category",
    "property_sources",
]
