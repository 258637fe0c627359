from __future__ import annotations

from starlette.applications import Starlette
from starlette.endpoints import HTTPEndpoint
from starlette.responses import PlainTextResponse
from starlette.routing import Host, Mount, Route, Router

from apidoc.graph.dispatch import DispatchGraph
from apidoc.graph.starlette import graph_from_app
from apidoc.graph.walker import walk
from apidoc.metadata import hidden


async def ping(request):
    return PlainTextResponse("pong")


async def secret(request):
    return PlainTextResponse("hush")


class Things(HTTPEndpoint):
    async def get(self, request):
        return PlainTextResponse("things")

    async def put(self, request):
        return PlainTextResponse("stored")


def test_routes_mounts_and_hosts_become_paths() -> None:
    app = Starlette(
        routes=[
            Route("/ping", ping),
            Mount("/api", routes=[Route("/things/{id:int}", Things)]),
            Host("docs.example.com", app=Router(routes=[Route("/about", ping)])),
        ]
    )

    result = walk(graph_from_app(app))

    assert result.paths == ["/ping", "/api/things/{id:int}", "/about"]
    records = {record.path: record for record in result}
    assert records["/ping"].methods == ("GET",)
    assert records["/ping"].resource_class is ping
    assert records["/api/things/{id:int}"].methods == ("GET", "PUT")


def test_function_routes_keep_declared_methods() -> None:
    app = Starlette(routes=[Route("/submit", ping, methods=["POST"])])

    (record,) = walk(graph_from_app(app)).records

    assert record.methods == ("POST",)


def test_shared_router_maps_to_one_node() -> None:
    shared = Router(routes=[Route("/items", ping)])
    app = Starlette(routes=[Mount("/v1", app=shared), Mount("/v2", app=shared)])

    graph = graph_from_app(app)
    result = walk(graph)

    assert result.paths == ["/v1/items", "/v2/items"]
    assert len({record.node_id for record in result}) == 1


def test_router_mounting_itself_is_reported_as_cycle() -> None:
    router = Router(routes=[Route("/ping", ping)])
    router.routes.append(Mount("/again", app=router))

    result = walk(graph_from_app(router))

    assert result.paths == ["/ping"]
    assert len(result.errors) == 1
    assert result.errors[0].prefix == "/again"


def test_hidden_endpoints_are_skipped() -> None:
    app = Starlette(routes=[Route("/ping", ping), Route("/secret", hidden(secret))])

    assert walk(graph_from_app(app)).paths == ["/ping"]


def test_graph_is_passed_through_and_application_kept() -> None:
    graph = DispatchGraph()
    assert graph_from_app(graph) is graph

    app = Starlette(routes=[])
    assert graph_from_app(app).application is app
