"""Centralized error handling for the documentation app."""
import logging
import uuid

from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse

from .api._shared import cors_headers, envelope_error
from .utils.errors import ErrorCode, IntrospectionError, UnknownCategoryError
from .utils.logging import current_request

log = logging.getLogger(__name__)

_STATUS_CODES = {
    404: ErrorCode.NOT_FOUND,
    405: ErrorCode.METHOD_NOT_ALLOWED,
}


def _correlation_id() -> str:
    context = current_request()
    if context is not None:
        return context.request_id
    return uuid.uuid4().hex


def _render(
    request: Request,
    code: ErrorCode,
    message: str | None,
    summary: str,
    *,
    status: int | None = None,
) -> JSONResponse:
    correlation_id = _correlation_id()
    payload = envelope_error(code, message, status=status)
    payload["meta"] = {"correlation_id": correlation_id, "summary": summary}
    status = int(payload["errors"][0]["status"])  # type: ignore[index]
    return JSONResponse(payload, status_code=status, headers=cors_headers(request))


def install_error_handlers(app) -> None:
    """Install error handlers on the Starlette app."""

    async def _on_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
        code = _STATUS_CODES.get(exc.status_code, ErrorCode.INTERNAL)
        response = _render(
            request, code, exc.detail, f"http_{exc.status_code}", status=exc.status_code
        )
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    async def _on_unknown_category(request: Request, exc: UnknownCategoryError) -> JSONResponse:
        return _render(request, ErrorCode.NOT_FOUND, str(exc), "unknown_category")

    async def _on_introspection_error(request: Request, exc: IntrospectionError) -> JSONResponse:
        log.error("introspection_error: %s", exc, extra={"correlation_id": _correlation_id()})
        return _render(request, ErrorCode.INTROSPECTION_FAILED, str(exc), "introspection_error")

    app.add_exception_handler(HTTPException, _on_http_exception)
    app.add_exception_handler(UnknownCategoryError, _on_unknown_category)
    app.add_exception_handler(IntrospectionError, _on_introspection_error)
