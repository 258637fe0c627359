"""Test configuration helpers to ensure package imports work from the repository root."""
from __future__ import annotations

import sys
from pathlib import Path

import pytest


ROOT = Path(__file__).resolve().parents[1]
REPO_ROOT = ROOT.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


@pytest.fixture
def bookmarks_app():
    from apidoc.samples.bookmarks import build_app, reset_store

    reset_store()
    yield build_app()
    reset_store()
