"""Tests for global exception handlers.

Validates that all exception types are handled consistently with
proper HTTP status codes, error format, and no information leakage.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from catalog_api.core.errors import (
    AppError,
    AuthenticationAppError,
    BlockedAppError,
    ConflictAppError,
    NotFoundAppError,
    RateLimitedAppError,
    ValidationAppError,
)
from catalog_api.core.exception_handlers import general_exception_handler, setup_exception_handlers


@pytest.fixture
def app_with_handlers() -> FastAPI:
    """Create FastAPI app with exception handlers registered."""
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def client(app_with_handlers: FastAPI) -> TestClient:
    """Create test client with handlers enabled."""
    return TestClient(app_with_handlers)


class TestAppErrorHandler:
    """Test handler for AppError and subclasses."""

    @pytest.mark.parametrize(
        ("error_cls", "status"),
        [
            (ValidationAppError, 400),
            (AuthenticationAppError, 401),
            (BlockedAppError, 403),
            (NotFoundAppError, 404),
            (ConflictAppError, 409),
            (RateLimitedAppError, 429),
            (AppError, 400),
        ],
    )
    def test_status_mapping(self, client: TestClient, app_with_handlers: FastAPI, error_cls, status) -> None:
        @app_with_handlers.get("/boom")
        async def boom():
            raise error_cls(code="some_code", message="Some message")

        response = client.get("/boom")

        assert response.status_code == status
        data = response.json()
        assert data["error"]["code"] == "some_code"
        assert data["error"]["message"] == "Some message"
        assert "request_id" in data["error"]
        assert "details" not in data["error"]

    def test_details_are_included_when_provided(self, client: TestClient, app_with_handlers: FastAPI):
        """Verify ValidationAppError includes details when provided."""
        @app_with_handlers.get("/test-validation-details")
        async def test_endpoint():
            raise ValidationAppError(
                code="invalid_product",
                message="Product payload failed validation",
                details={"errors": ["name is required"]},
            )

        response = client.get("/test-validation-details")

        assert response.status_code == 400
        assert response.json()["error"]["details"] == {"errors": ["name is required"]}

    def test_authentication_error_sets_challenge_header(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-auth")
        async def test_endpoint():
            raise AuthenticationAppError(code="unauthenticated", message="Authentication required.")

        response = client.get("/test-auth")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_error_headers_are_forwarded(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-limited")
        async def test_endpoint():
            raise RateLimitedAppError(
                code="rate_limited",
                message="Rate limit exceeded.",
                headers={"Retry-After": "12"},
            )

        response = client.get("/test-limited")

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "12"


class TestGeneralExceptionHandler:
    """Test fallback handler for unexpected exceptions."""

    def test_unexpected_exception_handler_registered(self, app_with_handlers: FastAPI):
        """Verify fallback exception handler is registered."""
        assert Exception in app_with_handlers.exception_handlers

    def test_general_exception_handler_logic(self):
        """Verify general_exception_handler returns correct structure."""
        request = AsyncMock()
        request.url.path = "/test"
        request.method = "GET"

        exc = RuntimeError("Unexpected error: user directory unavailable")
        response = asyncio.run(general_exception_handler(request, exc))

        data = json.loads(bytes(response.body).decode())
        assert response.status_code == 500
        assert data["error"]["code"] == "internal_server_error"
        # Original error message should NOT be in response
        assert "directory" not in data["error"]["message"]
        assert "request_id" in data["error"]

    def test_general_exception_handler_never_leaks_stack_trace(self):
        """Verify stack traces are never included in response."""
        request = AsyncMock()
        request.url.path = "/test"
        request.method = "GET"

        exc = ValueError("Test error with details")
        response = asyncio.run(general_exception_handler(request, exc))

        response_text = bytes(response.body).decode()
        assert "Traceback" not in response_text
        assert "File \"" not in response_text
        assert "ValueError" not in response_text


class TestErrorHandlerIntegration:
    """Integration tests for exception handler setup."""

    def test_setup_exception_handlers_registers_handlers(self, app_with_handlers: FastAPI):
        assert AppError in app_with_handlers.exception_handlers
        assert Exception in app_with_handlers.exception_handlers

    def test_multiple_handler_setups_does_not_fail(self):
        """Verify calling setup_exception_handlers multiple times is safe."""
        app = FastAPI()

        setup_exception_handlers(app)
        setup_exception_handlers(app)

        assert AppError in app.exception_handlers
