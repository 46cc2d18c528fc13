"""Global exception handlers for consistent error responses.

This module provides FastAPI exception handlers that intercept all errors
(domain and unexpected) and return consistent JSON responses with proper
HTTP status codes and traceability.

Design:
- AppError subclasses → appropriate HTTP status (400, 401, 403, 404, 409, 429)
- Unexpected Exception → generic 500 (safety net)
- All responses include request_id for distributed tracing
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from catalog_api.core.errors import (
    AppError,
    AuthenticationAppError,
    BlockedAppError,
    ConflictAppError,
    NotFoundAppError,
    PermissionAppError,
    RateLimitedAppError,
)
from catalog_api.core.logging import get_request_id

logger = logging.getLogger(__name__)


def status_code_for(exc: AppError) -> int:
    """Map a domain error to its HTTP status code (default 400)."""
    if isinstance(exc, AuthenticationAppError):
        return 401
    if isinstance(exc, (BlockedAppError, PermissionAppError)):
        return 403
    if isinstance(exc, NotFoundAppError):
        return 404
    if isinstance(exc, ConflictAppError):
        return 409
    if isinstance(exc, RateLimitedAppError):
        return 429
    return 400


def build_error_response(exc: AppError) -> JSONResponse:
    """Render an AppError as the standard ``{"error": {...}}`` body.

    Shared by the exception handler and by middleware, where raised
    exceptions would bypass the registered handlers.
    """
    status_code = status_code_for(exc)

    error_content = {
        "code": exc.code,
        "message": exc.message,
        "request_id": get_request_id(),
    }

    # Include details only if present (optional structured context)
    if exc.details:
        error_content["details"] = exc.details

    headers = dict(exc.headers or {})
    if status_code == 401:
        headers.setdefault("WWW-Authenticate", "Bearer")

    return JSONResponse(
        status_code=status_code,
        content={"error": error_content},
        headers=headers or None,
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors with consistent JSON format.

    All responses include:
    - error.code: Machine-readable error code
    - error.message: Human-readable message
    - error.request_id: For distributed tracing
    - error.details: Optional structured context

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with appropriate status code and error details.
    """
    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code_for(exc),
            "has_details": bool(exc.details),
            "request_path": request.url.path,
        },
    )
    return build_error_response(exc)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Logs detailed information for debugging while returning a generic message,
    so no stack traces or internals reach the client.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
        },
        exc_info=exc,
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": get_request_id(),
            }
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app.

    Example:
        >>> from fastapi import FastAPI
        >>> from catalog_api.core.exception_handlers import setup_exception_handlers
        >>> app = FastAPI()
        >>> setup_exception_handlers(app)
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
