"""
Integration test fixtures for Alien Food Push.

Provides fixtures specific to integration testing:
- FastAPI test client with an isolated database
- Admin secret and VAPID keys from the environment
- Mocked push service (pywebpush)
"""

from collections.abc import Generator
from unittest.mock import MagicMock, patch

import pytest


ADMIN_SECRET = "test-admin-secret"


# ─────────────────────────────────────────────────────────────────────────────
# Backend API Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def vapid_env(monkeypatch) -> dict:
    """Configure a persistent VAPID key pair and admin secret."""
    from alienfood.push.vapid import generate_vapid_keys

    keys = generate_vapid_keys()
    monkeypatch.setenv("VAPID_PUBLIC_KEY", keys["public_key"])
    monkeypatch.setenv("VAPID_PRIVATE_KEY", keys["private_key"])
    monkeypatch.setenv("ADMIN_SECRET", ADMIN_SECRET)
    return keys


@pytest.fixture
def mock_webpush() -> Generator[MagicMock, None, None]:
    """Replace the push service call; every send succeeds unless configured."""
    with patch("alienfood.push.web_push.webpush") as mock:
        mock.return_value = MagicMock(status_code=201)
        yield mock


@pytest.fixture
def test_client(push_db, vapid_env, mock_webpush):
    """
    Create a test client for the backend API.

    The lifespan runs on enter, so the schema exists in the temporary
    database before the first request.
    """
    from fastapi.testclient import TestClient

    from alienfood.backend.main import app

    with TestClient(app) as client:
        yield client


@pytest.fixture
def admin_headers() -> dict:
    return {"x-admin-secret": ADMIN_SECRET}
