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

from app.core.errors import (
    AppError,
    AuthenticationAppError,
    BackendAppError,
    ForbiddenAppError,
    LLMAppError,
    NotFoundAppError,
    StorageAppError,
    ValidationAppError,
)
from app.core.exception_handlers import setup_exception_handlers, status_code_for


@pytest.fixture
def app_with_handlers() -> FastAPI:
    """Create FastAPI app with exception handlers registered."""
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def client(app_with_handlers: FastAPI) -> TestClient:
    """Create test client with handlers enabled."""
    return TestClient(app_with_handlers, raise_server_exceptions=False)


class TestAppErrorHandler:
    """Test handler for AppError and subclasses."""

    def test_validation_error_returns_400(self, client: TestClient, app_with_handlers: FastAPI):
        """Verify ValidationAppError returns HTTP 400."""
        @app_with_handlers.get("/test-validation")
        async def test_endpoint():
            raise ValidationAppError(
                code="too_many_keywords",
                message="At most 5 keywords are allowed"
            )

        response = client.get("/test-validation")

        assert response.status_code == 400
        data = response.json()
        assert data["error"]["code"] == "too_many_keywords"
        assert data["error"]["message"] == "At most 5 keywords are allowed"
        assert "request_id" in data["error"]
        assert "details" not in data["error"]

    def test_validation_error_includes_details(self, client: TestClient, app_with_handlers: FastAPI):
        """Verify ValidationAppError includes details when provided."""
        @app_with_handlers.get("/test-validation-details")
        async def test_endpoint():
            raise ValidationAppError(
                code="keyword_too_long",
                message="Keyword exceeds maximum length",
                details={"max_value": 50, "actual_value": 80},
            )

        response = client.get("/test-validation-details")

        assert response.status_code == 400
        data = response.json()
        assert data["error"]["details"]["max_value"] == 50
        assert data["error"]["details"]["actual_value"] == 80

    def test_authentication_error_returns_401(self, client: TestClient, app_with_handlers: FastAPI):
        """Verify AuthenticationAppError returns HTTP 401 Unauthorized."""
        @app_with_handlers.get("/test-auth")
        async def test_endpoint():
            raise AuthenticationAppError(
                code="not_authenticated",
                message="Authentication required"
            )

        response = client.get("/test-auth")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "not_authenticated"

    def test_llm_error_returns_500(self, client: TestClient, app_with_handlers: FastAPI):
        """Verify LLMAppError returns HTTP 500."""
        @app_with_handlers.get("/test-llm")
        async def test_endpoint():
            raise LLMAppError(
                code="api_error",
                message="LLM service returned an error"
            )

        response = client.get("/test-llm")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "api_error"

    @pytest.mark.parametrize(
        ("exc", "expected"),
        [
            (AppError(code="x", message="x"), 400),
            (ValidationAppError(code="x", message="x"), 400),
            (AuthenticationAppError(code="x", message="x"), 401),
            (ForbiddenAppError(code="x", message="x"), 403),
            (NotFoundAppError(code="x", message="x"), 404),
            (LLMAppError(code="x", message="x"), 500),
            (StorageAppError(code="x", message="x"), 500),
            (BackendAppError(code="x", message="x"), 502),
        ],
    )
    def test_status_code_mapping(self, exc: AppError, expected: int):
        assert status_code_for(exc) == expected

    def test_error_response_format_is_consistent(self, client: TestClient, app_with_handlers: FastAPI):
        """Verify error responses have consistent JSON structure."""
        @app_with_handlers.get("/test-format")
        async def test_endpoint():
            raise NotFoundAppError(code="job_not_found", message="Job not found")

        response = client.get("/test-format")
        data = response.json()

        assert response.status_code == 404
        assert "error" in data
        assert "code" in data["error"]
        assert "message" in data["error"]
        assert "request_id" in data["error"]


class TestGeneralExceptionHandler:
    """Test fallback handler for unexpected exceptions."""

    def test_unexpected_exception_handler_registered(self, app_with_handlers: FastAPI):
        """Verify fallback exception handler is registered."""
        assert Exception in app_with_handlers.exception_handlers

    def test_unexpected_exception_returns_generic_500(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-crash")
        async def test_endpoint():
            raise RuntimeError("database connection failed")

        response = client.get("/test-crash")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "internal_server_error"
        assert "database connection" not in response.text

    def test_general_exception_handler_never_leaks_stack_trace(self):
        """Verify stack traces are never included in response."""
        from app.core.exception_handlers import general_exception_handler

        request = AsyncMock()
        request.url.path = "/test"
        request.method = "GET"

        exc = ValueError("Test error with details")
        response = asyncio.run(general_exception_handler(request, exc))

        response_text = bytes(response.body).decode()
        data = json.loads(response_text)
        assert response.status_code == 500
        assert "request_id" in data["error"]
        assert "Traceback" not in response_text
        assert "File \"" not in response_text
        assert "ValueError" not in response_text


def test_multiple_handler_setups_does_not_fail():
    """Verify calling setup_exception_handlers multiple times is safe."""
    app = FastAPI()

    setup_exception_handlers(app)
    setup_exception_handlers(app)

    assert AppError in app.exception_handlers
