"""Helpers for loading local ``.env`` defaults before settings are read."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

__all__ = ["load_env", "reset_env_loaded"]


_env_loaded = False


def load_env(*, dotenv_path: Optional[str | Path] = None) -> bool:
    """Load a ``.env`` file once and report whether anything was read.

    ``APIDOC_DOTENV`` may point at an alternative file. Values already present in
    the process environment always win over the file.
    """

    global _env_loaded
    if _env_loaded:
        return False

    path = dotenv_path or os.getenv("APIDOC_DOTENV") or None
    loaded = load_dotenv(dotenv_path=path, override=False)
    _env_loaded = True
    return bool(loaded)


def reset_env_loaded() -> None:
    """Allow :func:`load_env` to run again (used by tests)."""

    global _env_loaded
    _env_loaded = False
