"""Shared helpers for the documentation routes."""
from __future__ import annotations

from typing import Dict, Mapping

from starlette.requests import Request
from starlette.responses import JSONResponse

from ..utils.errors import ErrorCode, make_error

READ_METHOD = "GET"


def envelope_error(
    code: ErrorCode,
    message: str | None = None,
    *,
    recovery: tuple[str, ...] | None = None,
    status: int | None = None,
) -> Dict[str, object]:
    return {
        "ok": False,
        "data": None,
        "errors": [make_error(code, message=message, recovery=recovery, status=status)],
    }


def error_response(
    code: ErrorCode,
    message: str | None = None,
    *,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    payload = envelope_error(code, message)
    status = int(payload["errors"][0]["status"])  # type: ignore[index]
    return JSONResponse(payload, status_code=status, headers=dict(headers or {}))


def cors_headers(request: Request) -> Dict[str, str]:
    """Headers to add when *request* is a cross-origin request.

    Only decorates the response; it never rejects a request.
    """

    if "origin" not in request.headers:
        return {}
    headers = {"Access-Control-Allow-Origin": "*"}
    requested_method = request.headers.get("access-control-request-method")
    if requested_method:
        headers["Access-Control-Allow-Methods"] = READ_METHOD
    requested_headers = request.headers.get("access-control-request-headers")
    if requested_headers:
        headers["Access-Control-Allow-Headers"] = requested_headers
    return headers


__all__ = ["READ_METHOD", "cors_headers", "envelope_error", "error_response"]
