"""Shared test fixtures for Alien Food Push tests.

This module provides common fixtures used across all test modules:
- Database isolation with temporary files
- Config isolation (no args/push.yaml, no stray environment variables)
- Standard browser subscription data

Usage:
    def test_something(push_db):
        # alienfood.DB_PATH points at a throwaway file for this test
        ...
"""

import os
import tempfile
from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest


PUSH_ENV_VARS = [
    "ALIENFOOD_API_URL",
    "ALIENFOOD_VAPID_PUBLIC_KEY",
    "ALIENFOOD_CORS_ORIGINS",
    "ADMIN_SECRET",
    "VAPID_PUBLIC_KEY",
    "VAPID_PRIVATE_KEY",
    "VAPID_SUBJECT",
]


# ─────────────────────────────────────────────────────────────────────────────
# Database Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def temp_db() -> Generator[Path, None, None]:
    """Create a temporary database file for testing.

    The database file is automatically deleted after the test completes.

    Yields:
        Path to the temporary database file
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    yield db_path

    # Cleanup
    if db_path.exists():
        os.unlink(db_path)


@pytest.fixture
def push_db(temp_db: Path) -> Generator[Path, None, None]:
    """Point the push database at a temporary file."""
    with patch("alienfood.DB_PATH", temp_db):
        yield temp_db


# ─────────────────────────────────────────────────────────────────────────────
# Config Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch) -> Path:
    """Ignore the repository's args/push.yaml and push-related env vars."""
    missing = tmp_path / "push.yaml"
    for name in PUSH_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("alienfood.config.CONFIG_FILE", missing)
    monkeypatch.setattr("alienfood.push.vapid.CONFIG_FILE", missing)
    monkeypatch.setattr("alienfood.push.vapid._generated_keys", None)
    return missing


# ─────────────────────────────────────────────────────────────────────────────
# Subscription Data
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def subscription_json() -> dict:
    """Browser PushSubscription.toJSON() output."""
    return {
        "endpoint": "https://fcm.googleapis.com/fcm/send/abc123",
        "expirationTime": None,
        "keys": {
            "p256dh": "BNcRdreALRFXTkOOUHK1EtK2wtaz5Ry4YfYCA_0QTpQtUbVlUls0VJXg7A8u-Ts1XbjhazAkj7I99e8QcYP7DkM",
            "auth": "tBHItJI5svbpez7KI4CCXg",
        },
    }


@pytest.fixture
def make_subscription():
    """Factory for subscription JSON with an arbitrary endpoint."""

    def _make(endpoint: str) -> dict:
        return {
            "endpoint": endpoint,
            "expirationTime": None,
            "keys": {"p256dh": "BNcRdreALRFXTkOOUHK1EtK2wtaz5Ry4", "auth": "tBHItJI5svbpez7KI4CCXg"},
        }

    return _make
