"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It pins APP_ENV to "testing" and a fast bcrypt cost before settings load.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("AUTH_TOKEN_SECRET", "test-signing-secret")
os.environ.setdefault("AUTH_BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import Callable  # noqa: E402

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from catalog_api.core.app_factory import create_app  # noqa: E402
from catalog_api.core.config import AdmissionSettings, Settings  # noqa: E402


@pytest.fixture
def make_app() -> Callable[..., FastAPI]:
    """Build an isolated app; keyword arguments override admission settings."""

    def _make(**admission_overrides) -> FastAPI:
        return create_app(Settings(admission=AdmissionSettings(**admission_overrides)))

    return _make


@pytest.fixture
def app(make_app) -> FastAPI:
    return make_app()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture
def registered_user(client: TestClient) -> dict:
    """Register a user through the API and return the response plus password."""
    password = "correct-horse-battery"
    resp = client.post(
        "/v1/users/register",
        json={"username": "alice", "email": "alice@example.com", "password": password},
    )
    assert resp.status_code == 201
    return {**resp.json(), "password": password}


@pytest.fixture
def auth_headers(registered_user: dict) -> dict[str, str]:
    return {"Authorization": f"Bearer {registered_user['api_key']}"}
