from __future__ import annotations

import logging

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from sxg_prover.infrastructure.http.middleware import _truncate_body, request_logging_middleware


def _app() -> FastAPI:
    app = FastAPI()
    app.middleware("http")(request_logging_middleware)

    @app.post("/echo")
    async def echo(payload: dict[str, str]) -> dict[str, str]:
        return payload

    return app


def test_request_id_is_propagated(caplog: pytest.LogCaptureFixture) -> None:
    client = TestClient(_app())

    with caplog.at_level(logging.INFO, logger="sxg_prover.http"):
        response = client.post("/echo", json={"a": "b"}, headers={"x-request-id": "abc123"})

    assert response.status_code == 200
    assert response.headers["x-request-id"] == "abc123"
    messages = [record.getMessage() for record in caplog.records]
    assert "request_received" in messages
    assert "request_completed" in messages
    completed = next(r for r in caplog.records if r.getMessage() == "request_completed")
    assert completed.__dict__["data"]["status_code"] == 200
    assert completed.__dict__["data"]["path"] == "/echo"


def test_request_id_is_generated_when_absent() -> None:
    response = TestClient(_app()).post("/echo", json={})

    assert len(response.headers["x-request-id"]) == 32


def test_truncate_body() -> None:
    assert _truncate_body(b"short") == "short"
    assert _truncate_body(b"x" * 600).endswith("... (truncated)")
    assert _truncate_body(b"\xff\xfe") == "<binary data: 2 bytes>"
