from __future__ import annotations

import logging
import os

import pytest

from apidoc.utils import env
from apidoc.utils.config import DocsSettings, normalize_mount_path
from apidoc.utils.errors import (
    CyclicGraphError,
    ErrorCode,
    ExtractorFailure,
    IntrospectionError,
    make_error,
)
from apidoc.utils.logging import current_request, increment_counter, request_scope


@pytest.mark.parametrize(
    "code, status",
    [
        (ErrorCode.NOT_FOUND, 404),
        (ErrorCode.METHOD_NOT_ALLOWED, 405),
        (ErrorCode.INTROSPECTION_FAILED, 500),
        (ErrorCode.INTERNAL, 500),
    ],
)
def test_error_templates(code: ErrorCode, status: int) -> None:
    payload = make_error(code)
    assert payload["status"] == status
    assert payload["code"] == code.value
    assert payload["message"]
    assert payload["recovery"]


def test_make_error_overrides() -> None:
    payload = make_error(ErrorCode.INTERNAL, "broken", recovery=["wait"], status=503)
    assert payload == {"status": 503, "code": "INTERNAL", "message": "broken", "recovery": ["wait"]}


def test_cyclic_error_message_names_the_chain() -> None:
    error = CyclicGraphError([0, 3, 0], "/loop")
    assert isinstance(error, IntrospectionError)
    assert error.chain == (0, 3, 0)
    assert "0 -> 3 -> 0" in str(error)
    failure = ExtractorFailure("annotations", "property", "uri", ValueError("x"))
    assert failure.describe() == "annotations.property(uri): ValueError('x')"


def test_settings_from_environment() -> None:
    settings = DocsSettings.from_env(
        {
            "APIDOC_API_VERSION": " 3.1 ",
            "APIDOC_BASE_PATH": "",
            "APIDOC_MOUNT_PATH": "docs/",
            "APIDOC_VALIDATE_DOCUMENTS": "yes",
        }
    )
    assert settings == DocsSettings(
        api_version="3.1", base_path=None, mount_path="/docs", validate_documents=True
    )
    assert DocsSettings.from_env({}) == DocsSettings()


def test_settings_override_ignores_none() -> None:
    settings = DocsSettings(api_version="1.1").override(
        api_version=None, base_path="http://h", mount_path="/x/"
    )
    assert settings.api_version == "1.1"
    assert settings.base_path == "http://h"
    assert settings.mount_path == "/x"


def test_normalize_mount_path() -> None:
    assert normalize_mount_path(None) == "/api-docs"
    assert normalize_mount_path("/") == "/api-docs"
    assert normalize_mount_path("/a/b/") == "/a/b"


def test_load_env_reads_dotenv_once(tmp_path, monkeypatch) -> None:
    dotenv = tmp_path / ".env"
    dotenv.write_text("APIDOC_TEST_VALUE=from-file\n", encoding="utf-8")
    monkeypatch.delenv("APIDOC_TEST_VALUE", raising=False)
    env.reset_env_loaded()
    try:
        assert env.load_env(dotenv_path=dotenv) is True
        assert env.load_env(dotenv_path=dotenv) is False
        assert os.environ["APIDOC_TEST_VALUE"] == "from-file"
    finally:
        monkeypatch.delenv("APIDOC_TEST_VALUE", raising=False)


def test_request_scope_tracks_counters(caplog) -> None:
    caplog.set_level(logging.INFO, logger="apidoc.request")
    with request_scope("docs", path="/api-docs") as scope:
        assert current_request() is scope
        increment_counter("hits")
        increment_counter("hits")
    assert scope.counters == {"hits": 2}
    assert current_request() is None
    messages = [record.getMessage() for record in caplog.records]
    assert "request.start" in messages
    assert "request.finish" in messages
    finish = next(record for record in caplog.records if record.getMessage() == "request.finish")
    assert finish.path == "/api-docs"
    assert finish.counters == {"hits": 2}
    assert finish.request_id == scope.request_id
