"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Fields are optional so each error only carries what applies to it.
    """

    hint: str
    field: str
    errors: list[str]
    limit: int
    remaining: int
    retry_after: int
    product_id: int
    review_id: int
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
        headers: Optional response headers (e.g. Retry-After).
    """

    code: str
    message: str
    details: ErrorDetails | None = None
    headers: dict[str, str] | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class AuthenticationAppError(AppError):
    """Raised when a caller cannot be identified.

    Missing, invalid, expired and malformed credentials all surface as this
    single error so clients cannot tell the failure modes apart.
    """


class RateLimitedAppError(AppError):
    """Raised when a client exhausted its sliding-window budget."""


class BlockedAppError(AppError):
    """Raised when a client is locked out after repeated auth failures."""


class PermissionAppError(AppError):
    """Raised when an authenticated caller acts on a resource it does not own."""


class NotFoundAppError(AppError):
    """Raised when a requested resource does not exist."""


class ConflictAppError(AppError):
    """Raised when a resource would violate a uniqueness constraint."""
