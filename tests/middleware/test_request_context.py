"""Tests for the request context middleware.

Every response carries an X-Request-ID header (generated or echoed), and
one completion line is logged per request.
"""

from __future__ import annotations

import logging
import uuid

import pytest
from fastapi.testclient import TestClient

from idp.core.config import Settings
from idp.main import create_app
from idp.repos.pg_client_repo import PgClientRepo
from idp.repos.user_store import InMemoryUserStore
from tests.conftest import CLIENT_ID, REDIRECT_URI, UnreachableDatabase


def test_request_id_generated_when_not_provided(client: TestClient) -> None:
    resp = client.get("/health")
    req_id = resp.headers.get("x-request-id")
    assert req_id is not None
    uuid.UUID(req_id)  # raises ValueError if invalid


def test_request_id_echoed_when_provided(client: TestClient) -> None:
    custom_id = "my-custom-request-id-123"
    resp = client.get("/health", headers={"X-Request-ID": custom_id})
    assert resp.headers.get("x-request-id") == custom_id


def test_request_id_present_on_rejected_authorize(client: TestClient) -> None:
    resp = client.get("/authorize", params={"client_id": "unknown"})
    assert resp.status_code == 400
    assert resp.headers.get("x-request-id") is not None


def test_completion_line_carries_client_id(
    client: TestClient, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.INFO, logger="idp.middleware.request_context"):
        client.get(
            "/authorize",
            params={"client_id": CLIENT_ID, "redirect_uri": REDIRECT_URI},
            headers={"X-Request-ID": "req-42"},
        )

    records = [
        r for r in caplog.records if r.name == "idp.middleware.request_context"
    ]
    assert len(records) == 1
    assert records[0].client_id == CLIENT_ID  # type: ignore[attr-defined]
    assert records[0].request_id == "req-42"  # type: ignore[attr-defined]
    assert "GET /authorize" in records[0].getMessage()


def test_server_error_completion_line_is_a_warning(
    settings: Settings,
    user_store: InMemoryUserStore,
    caplog: pytest.LogCaptureFixture,
) -> None:
    app = create_app(
        settings,
        client_repo=PgClientRepo(UnreachableDatabase()),  # type: ignore[arg-type]
        user_store=user_store,
    )
    with caplog.at_level(logging.INFO, logger="idp.middleware.request_context"):
        resp = TestClient(app).get(
            "/authorize",
            params={"client_id": CLIENT_ID, "redirect_uri": REDIRECT_URI},
        )

    assert resp.status_code == 500
    records = [
        r for r in caplog.records if r.name == "idp.middleware.request_context"
    ]
    assert len(records) == 1
    assert records[0].levelno == logging.WARNING
