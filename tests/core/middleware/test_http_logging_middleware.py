from __future__ import annotations

import json
import logging

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.logging import JsonFormatter
from app.core.middleware.http_logging import HttpLoggingMiddleware, resolve_request_id


def _app_with_failing_route() -> FastAPI:
    app = FastAPI()
    app.add_middleware(HttpLoggingMiddleware)

    @app.post("/api/chat")
    async def chat() -> dict[str, str]:
        raise RuntimeError("upstream exploded")

    return app


def _http_records(caplog: pytest.LogCaptureFixture, level: int) -> list[logging.LogRecord]:
    return [r for r in caplog.records if r.name == "app.http" and r.levelno == level]


@pytest.mark.parametrize(
    ("header", "kept"),
    [
        ("chat-abc_123", True),
        ("a.b-c", True),
        (None, False),
        ("", False),
        ("..leading-dot", False),
        ("has spaces", False),
        ("x" * 129, False),
    ],
)
def test_resolve_request_id(header: str | None, kept: bool) -> None:
    resolved = resolve_request_id(header)
    if kept:
        assert resolved == header
    else:
        assert resolved != header
        assert len(resolved) == 32


def test_chat_request_is_logged_with_route_template_only(
    client: TestClient, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.INFO, logger="app.http")

    res = client.post("/api/chat?debug=1", json={}, headers={"X-Request-ID": "chat-7"})

    assert res.status_code == 400
    assert res.headers["x-request-id"] == "chat-7"

    [record] = _http_records(caplog, logging.INFO)
    assert record.__dict__["request_id"] == "chat-7"
    assert record.__dict__["http_method"] == "POST"
    assert record.__dict__["request_path"] == "/api/chat"
    assert record.__dict__["status_code"] == 400
    assert record.__dict__["duration_ms"] >= 0


def test_unknown_route_uses_fixed_label(
    client: TestClient, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.INFO, logger="app.http")

    res = client.get("/api/chat/history/123")

    assert res.status_code == 404
    [record] = _http_records(caplog, logging.INFO)
    assert record.__dict__["request_path"] == "unmatched"


def test_unhandled_exception_is_logged_with_stack_trace(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="app.http")

    with TestClient(_app_with_failing_route(), raise_server_exceptions=False) as c:
        res = c.post("/api/chat", headers={"X-Request-ID": "chat-err.1"})

    assert res.status_code == 500
    [record] = _http_records(caplog, logging.ERROR)
    assert record.__dict__["request_id"] == "chat-err.1"
    assert record.__dict__["status_code"] == 500
    assert record.exc_info


def test_json_formatter_lifts_retry_fields() -> None:
    record = logging.LogRecord("app.chat", logging.WARNING, __file__, 1, "retrying", None, None)
    record.request_id = "chat-9"
    record.attempt = 2
    record.wait_seconds = 2.0

    payload = json.loads(JsonFormatter().format(record))

    assert payload["logger"] == "app.chat"
    assert payload["level"] == "WARNING"
    assert payload["request_id"] == "chat-9"
    assert payload["attempt"] == 2
    assert payload["wait_seconds"] == 2.0
    assert payload["status_code"] is None
