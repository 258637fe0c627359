"""Small bookmarks service used as the default application to document.

Users own bookmarks; both live in process memory. Only the routing table and
the documentation attributes matter to :mod:`apidoc`, the handlers are kept
just functional enough to exercise by hand.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Union

from starlette.applications import Starlette
from starlette.endpoints import HTTPEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Mount, Route

from ..metadata import (
    api,
    api_model,
    api_model_property,
    api_operation,
    api_param,
    api_response,
    describe_application,
)


@api_model(description="Error payload returned by every failing call")
@dataclass
class Error:
    code: int
    message: str


@dataclass
class User:
    """A registered user."""

    username: str
    full_name: Optional[str] = None
    email: Optional[str] = field(
        default=None, metadata={"apidoc": {"description": "Contact address"}}
    )


@api_model_property("uri", description="Bookmarked address")
@api_model_property("restricting", description="Only visible to the owner")
@dataclass
class Bookmark:
    """A saved link."""

    uri: str
    short_description: str
    long_description: Optional[str] = None
    restricting: bool = False
    date_time: Optional[datetime] = None


@dataclass
class BookmarkList:
    """Bookmarks of one user."""

    owner: str
    items: List[Bookmark] = field(default_factory=list)


_USERS: Dict[str, User] = {}
_BOOKMARKS: Dict[str, Dict[str, Bookmark]] = {}


def reset_store() -> None:
    _USERS.clear()
    _BOOKMARKS.clear()


def _not_found(message: str) -> JSONResponse:
    return JSONResponse(asdict(Error(code=404, message=message)), status_code=404)


@api(category="users")
class UserResource(HTTPEndpoint):
    """Account of a single user."""

    @api_operation(summary="Get a user", response=User)
    @api_response(404, "Unknown user", model=Error)
    async def get(self, request: Request) -> Response:
        user = _USERS.get(request.path_params["username"])
        if user is None:
            return _not_found("Unknown user")
        return JSONResponse(asdict(user))

    @api_operation(summary="Create or replace a user", body=User, response=User)
    @api_response(400, "Invalid user payload", model=Error)
    async def put(self, request: Request) -> Response:
        username = request.path_params["username"]
        payload = await request.json()
        user = User(
            username=username,
            full_name=payload.get("full_name"),
            email=payload.get("email"),
        )
        _USERS[username] = user
        _BOOKMARKS.setdefault(username, {})
        return JSONResponse(asdict(user), status_code=201)

    async def delete(self, request: Request) -> Response:
        """Delete a user and all of their bookmarks."""
        username = request.path_params["username"]
        _USERS.pop(username, None)
        _BOOKMARKS.pop(username, None)
        return Response(status_code=204)


@api(category="bookmarks", description="Bookmarks owned by a user")
class BookmarksResource(HTTPEndpoint):
    @api_operation(summary="List bookmarks", response=BookmarkList, produces=["application/json"])
    @api_param("limit", type="integer", minimum=1, maximum=100, default=20)
    @api_response(404, "Unknown user", model=Error)
    async def get(self, request: Request) -> Response:
        username = request.path_params["username"]
        if username not in _USERS:
            return _not_found("Unknown user")
        limit = int(request.query_params.get("limit", 20))
        items = list(_BOOKMARKS.get(username, {}).values())[:limit]
        return JSONResponse({"owner": username, "items": [_bookmark_json(item) for item in items]})

    @api_operation(
        summary="Add a bookmark",
        body=Bookmark,
        response=Bookmark,
        consumes=["application/json"],
    )
    @api_response(201, "Bookmark created")
    @api_response(404, "Unknown user", model=Error)
    async def post(self, request: Request) -> Response:
        username = request.path_params["username"]
        if username not in _USERS:
            return _not_found("Unknown user")
        payload = await request.json()
        bookmark = Bookmark(
            uri=payload["uri"],
            short_description=payload.get("short_description", ""),
            long_description=payload.get("long_description"),
            restricting=bool(payload.get("restricting", False)),
            date_time=datetime.now(timezone.utc),
        )
        _BOOKMARKS.setdefault(username, {})[bookmark.uri] = bookmark
        return JSONResponse(_bookmark_json(bookmark), status_code=201)


@api(category="bookmarks")
class BookmarkResource(HTTPEndpoint):
    """A single bookmark of a user."""

    @api_operation(summary="Get a bookmark", response=Bookmark)
    @api_response(404, "Unknown bookmark", model=Error)
    async def get(self, request: Request) -> Response:
        bookmark = _BOOKMARKS.get(request.path_params["username"], {}).get(
            request.path_params["uri"]
        )
        if bookmark is None:
            return _not_found("Unknown bookmark")
        return JSONResponse(_bookmark_json(bookmark))

    @api_operation(summary="Remove a bookmark")
    @api_response(204, "Bookmark removed")
    async def delete(self, request: Request) -> Response:
        _BOOKMARKS.get(request.path_params["username"], {}).pop(
            request.path_params["uri"], None
        )
        return Response(status_code=204)


def _bookmark_json(bookmark: Bookmark) -> Dict[str, object]:
    payload = asdict(bookmark)
    if bookmark.date_time is not None:
        payload["date_time"] = bookmark.date_time.isoformat()
    return payload


def build_routes() -> List[Union[Route, Mount]]:
    return [
        Route("/users/{username}", UserResource, name="user"),
        Mount(
            "/users/{username}",
            routes=[
                Route("/bookmarks", BookmarksResource, name="bookmarks"),
                Route("/bookmarks/{uri:path}", BookmarkResource, name="bookmark"),
            ],
        ),
    ]


def build_app() -> Starlette:
    app = Starlette(routes=build_routes())
    return describe_application(
        app,
        title="Bookmarks",
        description="Social bookmarking service",
        contact_email="api@example.com",
        license_name="Apache 2.0",
        license_url="https://www.apache.org/licenses/LICENSE-2.0",
    )


__all__ = [
    "Bookmark",
    "BookmarkList",
    "BookmarkResource",
    "BookmarksResource",
    "Error",
    "User",
    "UserResource",
    "build_app",
    "build_routes",
    "reset_store",
]
