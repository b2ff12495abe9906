"""
Integration tests for storing Google connections and the internal token endpoint.
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.config import settings
from app.models.domain.oauth_domain import GoogleConnection
from app.routes import connections as connection_routes
from app.routes import internal as internal_routes
from app.services.core.connection_service import ConnectionServiceError

INTERNAL_KEY = "internal-test-key"


def _connection(expires_at: datetime | None, refresh_token: str | None = None) -> GoogleConnection:
    return GoogleConnection(
        user_id="user-123",
        access_token="stored-token",
        refresh_token=refresh_token,
        scope="https://www.googleapis.com/auth/gmail.settings.basic https://www.googleapis.com/auth/calendar",
        expires_at=expires_at,
        updated_at=datetime.now(UTC),
    )


@pytest.fixture
def connections(monkeypatch):
    service = AsyncMock()
    monkeypatch.setattr(connection_routes, "connection_service", service)
    monkeypatch.setattr(internal_routes, "connection_service", service)
    return service


@pytest.fixture
def client(apply_auth_override, connections, monkeypatch):
    monkeypatch.setattr(settings, "INTERNAL_API_KEY", INTERNAL_KEY)
    app = FastAPI()
    app.include_router(connection_routes.router)
    app.include_router(internal_routes.router)
    apply_auth_override(app)
    return TestClient(app)


def test_store_google_connection(client, connections):
    expires_at = datetime.now(UTC) + timedelta(hours=1)
    connections.store_connection.return_value = _connection(expires_at, refresh_token="refresh")

    response = client.put(
        "/connections/google",
        json={"provider_token": "ya29.token", "provider_refresh_token": "refresh", "expires_in": 3600},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["connected"] is True
    assert data["has_refresh_token"] is True
    assert data["has_gmail_access"] is True
    assert data["has_calendar_access"] is True

    kwargs = connections.store_connection.await_args.kwargs
    assert kwargs["access_token"] == "ya29.token"
    assert kwargs["expires_at"] > datetime.now(UTC)


def test_store_google_connection_requires_token(client):
    assert client.put("/connections/google", json={"provider_token": ""}).status_code == 422


def test_store_google_connection_failure(client, connections):
    connections.store_connection.side_effect = ConnectionServiceError("encryption failed")

    response = client.put("/connections/google", json={"provider_token": "ya29.token"})

    assert response.status_code == 500


def test_internal_token(client, connections):
    expires_at = datetime.now(UTC) + timedelta(hours=1)
    connections.get_connection.return_value = _connection(expires_at)

    response = client.get(
        "/internal/google/access-token",
        params={"user_id": "user-123"},
        headers={"X-Internal-API-Key": INTERNAL_KEY},
    )

    assert response.status_code == 200
    assert response.json() == {
        "access_token": "stored-token",
        "expires_at": int(expires_at.timestamp()),
    }


def test_internal_token_bad_key(client, connections):
    response = client.get(
        "/internal/google/access-token",
        params={"user_id": "user-123"},
        headers={"X-Internal-API-Key": "wrong"},
    )

    assert response.status_code == 401
    connections.get_connection.assert_not_awaited()


def test_internal_token_missing_key_header(client):
    response = client.get("/internal/google/access-token", params={"user_id": "user-123"})

    assert response.status_code == 401


def test_internal_token_not_configured(client, monkeypatch):
    monkeypatch.setattr(settings, "INTERNAL_API_KEY", None)

    response = client.get(
        "/internal/google/access-token",
        params={"user_id": "user-123"},
        headers={"X-Internal-API-Key": INTERNAL_KEY},
    )

    assert response.status_code == 500


def test_internal_token_requires_user_id(client):
    response = client.get(
        "/internal/google/access-token", headers={"X-Internal-API-Key": INTERNAL_KEY}
    )

    assert response.status_code == 400


def test_internal_token_no_connection(client, connections):
    connections.get_connection.return_value = None

    response = client.get(
        "/internal/google/access-token",
        params={"user_id": "user-123"},
        headers={"X-Internal-API-Key": INTERNAL_KEY},
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "no_connection"


def test_internal_token_expired(client, connections):
    connections.get_connection.return_value = _connection(datetime.now(UTC) - timedelta(minutes=5))

    response = client.get(
        "/internal/google/access-token",
        params={"user_id": "user-123"},
        headers={"X-Internal-API-Key": INTERNAL_KEY},
    )

    assert response.status_code == 401
    assert response.json()["detail"] == "token_expired"
