"""Application wiring: a host app with its documentation endpoint attached."""
from __future__ import annotations

import logging
from typing import Any, Optional

from starlette.applications import Starlette

from .api.endpoint import SwaggerSpecificationEndpoint
from .error_handlers import install_error_handlers
from .samples.bookmarks import build_app as build_sample_app
from .utils.config import DocsSettings
from .utils.logging import configure_root

logger = logging.getLogger("apidoc.app")
_CONFIGURED = False


def configure() -> None:
    global _CONFIGURED
    if _CONFIGURED:
        return
    configure_root()
    _CONFIGURED = True


def build_docs_app(
    settings: Optional[DocsSettings] = None, target: Any = None
) -> Starlette:
    """Attach the documentation endpoint to *target* (the sample app by default)."""

    settings = settings or DocsSettings.from_env()
    app = target if target is not None else build_sample_app()
    endpoint = SwaggerSpecificationEndpoint(
        app,
        api_version=settings.api_version,
        base_path=settings.base_path,
        mount_path=settings.mount_path,
        validate=settings.validate_documents,
    )
    endpoint.attach(app)
    install_error_handlers(app)
    app.state.api_docs = endpoint
    logger.info(
        "api_docs.attached",
        extra={"mount_path": endpoint.mount_path, "validate": endpoint.validate},
    )
    return app


def create_app() -> Starlette:
    configure()
    return build_docs_app()


__all__ = ["build_docs_app", "configure", "create_app"]
