"""Shared fixtures for web API tests."""

import os
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from cli.config_models import StewardConfig
from web.user_store import init_db


@pytest.fixture
def jwt_secret():
    return "test-jwt-secret"


def _make_auth_token(jwt_secret, user_id, email="u@test.com", name="U"):
    return jwt.encode(
        {"sub": user_id, "email": email, "name": name},
        jwt_secret,
        algorithm="HS256",
    )


@pytest.fixture
def auth_headers(jwt_secret):
    token = _make_auth_token(jwt_secret, "user-123", "test@example.com", "Test")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers_b(jwt_secret):
    """Second user for isolation tests."""
    token = _make_auth_token(jwt_secret, "user-456", "b@test.com", "UserB")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def users_db(tmp_path):
    """Fresh users.db for each test."""
    db_path = tmp_path / "users.db"
    init_db(db_path)
    return db_path


@pytest.fixture
def client(jwt_secret, tmp_path, users_db):
    """Test client with per-user tmp dirs."""
    env = {"STEWARD_JWT_SECRET": jwt_secret}

    def _mock_user_paths(user_id: str) -> dict:
        base = tmp_path / "users" / user_id
        base.mkdir(parents=True, exist_ok=True)
        return {"base": base, "db": base / "steward.db"}

    patches = [
        patch.dict(os.environ, env),
        patch("web.deps.get_config", return_value=StewardConfig()),
        patch("web.deps.get_user_paths", side_effect=_mock_user_paths),
        patch("web.user_store._DEFAULT_DB_PATH", users_db),
    ]

    for p in patches:
        p.start()

    from web.app import app

    with TestClient(app) as test_client:
        yield test_client

    for p in reversed(patches):
        p.stop()


@pytest.fixture
def journal_id(client, auth_headers):
    resp = client.post(
        "/api/journal",
        json={"content": "Felt good today. Need to call the dentist.", "energy": "high"},
        headers=auth_headers,
    )
    assert resp.status_code == 201
    return resp.json()["id"]
