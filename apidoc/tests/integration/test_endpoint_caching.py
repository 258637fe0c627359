"""Publish-once caching, failure handling and CORS on the documentation endpoint."""
from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor

from starlette.applications import Starlette
from starlette.testclient import TestClient

from apidoc.api.endpoint import SwaggerSpecificationEndpoint
from apidoc.graph.walker import walk
from apidoc.introspection.extractors import Extractor, default_extractors
from apidoc.introspection.model import Parameter
from apidoc.utils.errors import MissingResourceError


class CountingWalker:
    def __init__(self, *, delay: float = 0.0, failures: int = 0) -> None:
        self.calls = 0
        self.delay = delay
        self.failures = failures
        self._lock = threading.Lock()

    def __call__(self, graph, root, base_path):
        with self._lock:
            self.calls += 1
            attempt = self.calls
        if self.delay:
            time.sleep(self.delay)
        if attempt <= self.failures:
            raise MissingResourceError(999)
        return walk(graph, root, base_path)


def _client(endpoint: SwaggerSpecificationEndpoint, app: Starlette) -> TestClient:
    endpoint.attach(app)
    return TestClient(app)


def test_concurrent_first_requests_compute_once(bookmarks_app) -> None:
    walker = CountingWalker(delay=0.05)
    endpoint = SwaggerSpecificationEndpoint(bookmarks_app, walker=walker)
    barrier = threading.Barrier(8)

    def fetch():
        barrier.wait()
        return endpoint.definition()

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: fetch(), range(8)))

    assert walker.calls == 1
    assert all(result is results[0] for result in results)
    assert endpoint.computed


def test_concurrent_first_http_requests_compute_once(bookmarks_app) -> None:
    walker = CountingWalker(delay=0.05)
    endpoint = SwaggerSpecificationEndpoint(walker=walker)
    client = _client(endpoint, bookmarks_app)
    barrier = threading.Barrier(2)

    def fetch(path):
        barrier.wait()
        return client.get(path)

    with ThreadPoolExecutor(max_workers=2) as pool:
        responses = list(pool.map(fetch, ["/api-docs", "/api-docs/bookmarks"]))

    assert [response.status_code for response in responses] == [200, 200]
    assert walker.calls == 1
    assert responses[0].json()["apiVersion"] == responses[1].json()["apiVersion"]
    assert endpoint.computed


def test_repeated_requests_reuse_the_definition(bookmarks_app) -> None:
    walker = CountingWalker()
    client = _client(SwaggerSpecificationEndpoint(walker=walker), bookmarks_app)

    first = client.get("/api-docs").json()
    second = client.get("/api-docs").json()
    client.get("/api-docs/bookmarks")

    assert first == second
    assert walker.calls == 1


def test_failed_computation_is_not_cached(bookmarks_app) -> None:
    walker = CountingWalker(failures=1)
    endpoint = SwaggerSpecificationEndpoint(walker=walker)
    client = _client(endpoint, bookmarks_app)

    failed = client.get("/api-docs")
    assert failed.status_code == 500
    assert failed.json()["errors"][0]["code"] == "INTROSPECTION_FAILED"
    assert not endpoint.computed

    recovered = client.get("/api-docs")
    assert recovered.status_code == 200
    assert walker.calls == 2


def test_endpoint_without_source_reports_failure() -> None:
    endpoint = SwaggerSpecificationEndpoint()
    app = Starlette(routes=endpoint.routes())

    response = TestClient(app).get("/api-docs")

    assert response.status_code == 500
    assert response.json()["errors"][0]["code"] == "INTROSPECTION_FAILED"


def test_failing_extractor_still_serves_documents(bookmarks_app) -> None:
    class Broken(Extractor):
        name = "broken"

        def contribute_to_representation(self, representation, representation_class):
            raise ValueError("nope")

    endpoint = SwaggerSpecificationEndpoint(extractors=[*default_extractors(), Broken()])
    client = _client(endpoint, bookmarks_app)

    response = client.get("/api-docs/bookmarks")

    assert response.status_code == 200
    assert "Bookmark" in response.json()["models"]
    assert endpoint.report is not None
    assert {failure.extractor for failure in endpoint.report.failures} == {"broken"}


def test_cors_headers_follow_origin(bookmarks_app) -> None:
    client = _client(SwaggerSpecificationEndpoint(), bookmarks_app)

    plain = client.get("/api-docs")
    assert "access-control-allow-origin" not in plain.headers

    cross = client.get(
        "/api-docs/users",
        headers={
            "Origin": "https://ui.example.com",
            "Access-Control-Request-Method": "GET",
            "Access-Control-Request-Headers": "X-Token",
        },
    )
    assert cross.headers["access-control-allow-origin"] == "*"
    assert cross.headers["access-control-allow-methods"] == "GET"
    assert cross.headers["access-control-allow-headers"] == "X-Token"

    missing = client.get("/api-docs/missing", headers={"Origin": "https://ui.example.com"})
    assert missing.status_code == 404
    assert missing.headers["access-control-allow-origin"] == "*"


def test_validation_failures_are_logged_not_raised(bookmarks_app, caplog) -> None:
    class CookieParameters(Extractor):
        name = "cookies"

        def contribute_to_operation(self, resource, operation, resource_class, handler):
            operation.add_parameter(Parameter(name="session", location="cookie"))
            return None

    endpoint = SwaggerSpecificationEndpoint(
        extractors=[*default_extractors(), CookieParameters()], validate=True
    )
    client = _client(endpoint, bookmarks_app)
    caplog.set_level(logging.WARNING, logger="apidoc.api")

    response = client.get("/api-docs/users")

    assert response.status_code == 200
    assert any(
        record.getMessage() == "api_docs.validation_failed" for record in caplog.records
    )
