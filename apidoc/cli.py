"""Command line entry point serving documentation for an application."""
from __future__ import annotations

import argparse
import logging
from typing import Any, Optional, Sequence

import uvicorn
from uvicorn.importer import import_from_string

from .app import build_docs_app
from .utils.config import DocsSettings
from .utils.logging import configure_root

logger = logging.getLogger("apidoc.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Serve Swagger 1.2 documentation for a Starlette application"
    )
    parser.add_argument(
        "--app",
        type=str,
        default=None,
        help="Application to document as 'module:attribute', default: bundled bookmarks sample",
    )
    parser.add_argument(
        "--host", type=str, default="127.0.0.1", help="Bind host, default: 127.0.0.1"
    )
    parser.add_argument("--port", type=int, default=8000, help="Bind port, default: 8000")
    parser.add_argument(
        "--api-version", type=str, default=None, help="Version reported as apiVersion"
    )
    parser.add_argument(
        "--base-path", type=str, default=None, help="Base URL reported as basePath"
    )
    parser.add_argument(
        "--mount-path",
        type=str,
        default=None,
        help="Path serving the documentation, default: /api-docs",
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        default=None,
        help="Validate generated documents against the bundled JSON schemas",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def resolve_target(import_path: Optional[str]) -> Any:
    """Import the application named by *import_path*; call it when it is a factory."""

    if not import_path:
        return None
    target = import_from_string(import_path)
    if callable(target) and not hasattr(target, "router") and not hasattr(target, "routes"):
        target = target()
    return target


def settings_from_args(args: argparse.Namespace) -> DocsSettings:
    return DocsSettings.from_env().override(
        api_version=args.api_version,
        base_path=args.base_path,
        mount_path=args.mount_path,
        validate_documents=args.validate,
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    configure_root(logging.DEBUG if args.debug else logging.INFO)
    settings = settings_from_args(args)
    app = build_docs_app(settings, resolve_target(args.app))
    logger.info(
        "[Docs] Resource listing on http://%s:%s%s",
        args.host,
        args.port,
        settings.mount_path,
    )
    uvicorn.run(app, host=args.host, port=int(args.port))


if __name__ == "__main__":  # pragma: no cover
    main()


__all__ = ["build_parser", "main", "resolve_target", "settings_from_args"]
