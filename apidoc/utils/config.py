"""Runtime settings for the documentation app and CLI.

The introspection core never reads the environment; these values are resolved
here and handed to it explicitly by :mod:`apidoc.app` and :mod:`apidoc.cli`.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Final, Mapping, Optional


DEFAULT_API_VERSION: Final[str] = "1.0"
DEFAULT_MOUNT_PATH: Final[str] = "/api-docs"
SWAGGER_VERSION: Final[str] = "1.2"


def _parse_bool(value: str | None, *, default: bool = False) -> bool:
    if value is None:
        return default
    value = value.strip().lower()
    return value in {"1", "true", "yes", "on"}


def _parse_str(value: str | None) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def normalize_mount_path(path: str | None) -> str:
    """Return *path* with a single leading slash and no trailing slash."""

    if not path or not path.strip("/"):
        return DEFAULT_MOUNT_PATH
    return "/" + path.strip().strip("/")


@dataclass(frozen=True, slots=True)
class DocsSettings:
    """Settings supplied to the documentation endpoint by the embedding app."""

    api_version: Optional[str] = None
    base_path: Optional[str] = None
    mount_path: str = DEFAULT_MOUNT_PATH
    validate_documents: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "DocsSettings":
        env = os.environ if environ is None else environ
        return cls(
            api_version=_parse_str(env.get("APIDOC_API_VERSION")),
            base_path=_parse_str(env.get("APIDOC_BASE_PATH")),
            mount_path=normalize_mount_path(env.get("APIDOC_MOUNT_PATH")),
            validate_documents=_parse_bool(env.get("APIDOC_VALIDATE_DOCUMENTS")),
        )

    def override(self, **values: object) -> "DocsSettings":
        """Return a copy with every non-``None`` value in *values* applied."""

        updates = {key: value for key, value in values.items() if value is not None}
        if "mount_path" in updates:
            updates["mount_path"] = normalize_mount_path(str(updates["mount_path"]))
        return replace(self, **updates)


__all__ = [
    "DEFAULT_API_VERSION",
    "DEFAULT_MOUNT_PATH",
    "DocsSettings",
    "SWAGGER_VERSION",
    "normalize_mount_path",
]
