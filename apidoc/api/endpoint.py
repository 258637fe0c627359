"""HTTP endpoint serving Swagger documentation for a host application.

Usage::

    app = Starlette(routes=[...])
    SwaggerSpecificationEndpoint(app, api_version="2.0", base_path="http://api.example.com").attach(app)

``GET /api-docs`` then serves the resource listing and ``GET /api-docs/{category}``
the API declaration of one category.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, List, Optional, Sequence

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route
from starlette.types import Receive, Scope, Send

from ..graph.dispatch import DispatchGraph
from ..graph.starlette import graph_from_app
from ..graph.walker import walk
from ..introspection.engine import IntrospectionReport, Introspector, Walker
from ..introspection.extractors import Extractor
from ..introspection.model import Definition
from ..metadata import hidden
from ..swagger.translator import Document, to_api_declaration, to_resource_listing
from ..utils.config import DEFAULT_MOUNT_PATH, normalize_mount_path
from ..utils.errors import ErrorCode, IntrospectionError, UnknownCategoryError
from ..utils.logging import increment_counter, request_scope
from ._shared import READ_METHOD, cors_headers, error_response
from .validators import validate_api_declaration, validate_resource_listing


class _DocumentationApp:
    """ASGI adapter routing requests of any method to one endpoint."""

    def __init__(self, endpoint: "SwaggerSpecificationEndpoint") -> None:
        self.endpoint = endpoint

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        response = await self.endpoint.handle(Request(scope, receive))
        await response(scope, receive, send)


class SwaggerSpecificationEndpoint:
    """Computes the API definition once and serves it as Swagger 1.2."""

    def __init__(
        self,
        source: Any = None,
        *,
        api_version: Optional[str] = None,
        base_path: Optional[str] = None,
        mount_path: str = DEFAULT_MOUNT_PATH,
        extractors: Optional[Sequence[Extractor]] = None,
        walker: Walker = walk,
        validate: bool = False,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.source = source
        self.api_version = api_version
        self.base_path = base_path
        self.mount_path = normalize_mount_path(mount_path)
        self.validate = validate
        self.logger = logger or logging.getLogger("apidoc.api")
        self._introspector = Introspector(extractors, walker=walker)
        self._lock = threading.Lock()
        self._definition: Optional[Definition] = None
        self._report: Optional[IntrospectionReport] = None

    @property
    def computed(self) -> bool:
        return self._definition is not None

    @property
    def report(self) -> Optional[IntrospectionReport]:
        return self._report

    @property
    def extractors(self) -> List[Extractor]:
        return self._introspector.extractors

    def _graph(self) -> DispatchGraph:
        if self.source is None:
            raise IntrospectionError("No application was given to document")
        return graph_from_app(self.source)

    def definition(self) -> Definition:
        """Return the cached definition, computing it on first use.

        Concurrent first callers block on the lock until the definition is
        published. A failed computation publishes nothing, so the next call
        starts over.
        """

        definition = self._definition
        if definition is not None:
            return definition
        with self._lock:
            if self._definition is None:
                report = self._introspector.build(
                    self._graph(),
                    base_path=self.base_path,
                    api_version=self.api_version,
                )
                self._report = report
                self._definition = report.definition
            return self._definition

    def _checked(self, document: Document, kind: str) -> Document:
        if not self.validate:
            return document
        validator = (
            validate_resource_listing if kind == "listing" else validate_api_declaration
        )
        valid, errors = validator(document)
        if not valid:
            increment_counter("documents.invalid")
            self.logger.warning(
                "api_docs.validation_failed", extra={"document": kind, "errors": errors}
            )
        return document

    def resource_listing(self) -> Document:
        return self._checked(to_resource_listing(self.definition()), "listing")

    def api_declaration(self, category: str) -> Document:
        return self._checked(to_api_declaration(self.definition(), category), "declaration")

    async def handle(self, request: Request) -> Response:
        headers = cors_headers(request)
        category = request.path_params.get("category")
        name = "api_docs.declaration" if category is not None else "api_docs.listing"
        with request_scope(
            name,
            logger=self.logger,
            path=request.url.path,
            method=request.method,
        ) as scope:
            if request.method != READ_METHOD:
                headers["Allow"] = READ_METHOD
                scope.log(logging.INFO, "api_docs.method_not_allowed")
                return error_response(ErrorCode.METHOD_NOT_ALLOWED, headers=headers)
            if not self.computed:
                increment_counter("definition.compute")
            try:
                if category is None:
                    document = await run_in_threadpool(self.resource_listing)
                else:
                    document = await run_in_threadpool(self.api_declaration, category)
            except UnknownCategoryError as exc:
                scope.log(logging.INFO, "api_docs.unknown_category", category=category)
                return error_response(ErrorCode.NOT_FOUND, str(exc), headers=headers)
            except IntrospectionError as exc:
                scope.log(logging.ERROR, "api_docs.introspection_failed", error=str(exc))
                return error_response(ErrorCode.INTROSPECTION_FAILED, str(exc), headers=headers)
            return JSONResponse(document, headers=headers)

    def routes(self) -> List[Route]:
        """Two routes: the listing at the mount path and one declaration per category.

        Both routes match every method so that :meth:`handle` answers all of
        them. Categories may contain ``/``, hence the ``path`` convertor.
        """

        api_docs = hidden(_DocumentationApp(self))
        return [
            Route(self.mount_path, api_docs, name="api_docs"),
            Route(self.mount_path + "/{category:path}", api_docs, name="api_docs_category"),
        ]

    def attach(self, app: Any, mount_path: Optional[str] = None) -> "SwaggerSpecificationEndpoint":
        """Append the documentation routes to *app* and document it by default."""

        if mount_path is not None:
            self.mount_path = normalize_mount_path(mount_path)
        if self.source is None:
            self.source = app
        router = getattr(app, "router", app)
        router.routes.extend(self.routes())
        return self


__all__ = ["SwaggerSpecificationEndpoint"]
