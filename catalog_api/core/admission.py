"""Admission control wiring for the HTTP layer.

This module connects the admission controller adapter to incoming requests.

Design goals:
- Explicit ownership: the controller lives on ``app.state`` and is built once
  by the app factory, not held in module globals.
- Swap-friendly: routes and middleware only see AbstractAdmissionController.
- One check per request, before any handler logic runs.

Client identity is the peer address; the same key feeds the lockout tracker
when authentication fails.
"""

from __future__ import annotations

import logging

from fastapi import Request

from catalog_api.adapters.admission.base import BLOCKED, AbstractAdmissionController, AdmissionResult
from catalog_api.adapters.admission.in_memory import InMemoryAdmissionController
from catalog_api.core.config import AdmissionSettings
from catalog_api.core.errors import BlockedAppError, RateLimitedAppError
from catalog_api.core.logging import fingerprint

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"


def build_admission_controller(admission_settings: AdmissionSettings) -> AbstractAdmissionController:
    """Create the process-wide admission controller from configuration."""

    return InMemoryAdmissionController(
        max_requests=admission_settings.max_requests,
        window_seconds=admission_settings.window_seconds,
        lockout_threshold=admission_settings.lockout_threshold,
        lockout_duration_seconds=admission_settings.lockout_duration_seconds,
        max_tracked_clients=admission_settings.max_tracked_clients,
        sweep_interval_seconds=admission_settings.sweep_interval_seconds,
    )


def get_admission_controller(request: Request) -> AbstractAdmissionController:
    """Return the controller owned by the running app."""

    return request.app.state.admission


def client_id_for(request: Request) -> str:
    """Build the admission key for the current request (source address)."""

    return request.client.host if request.client and request.client.host else UNKNOWN_CLIENT


def _rejection_headers(result: AdmissionResult) -> dict[str, str]:
    headers = {"Retry-After": str(result.retry_after_seconds or 0)}
    if result.reason != BLOCKED:
        headers["X-RateLimit-Limit"] = str(result.limit)
        headers["X-RateLimit-Remaining"] = str(result.remaining)
    return headers


def admit_request(request: Request) -> None:
    """Run the admission check for one inbound request.

    Skips exempt paths and does nothing when admission is disabled.

    Raises:
        RateLimitedAppError: When the client's sliding window is full.
        BlockedAppError: When the client is locked out after auth failures.
    """

    admission_settings: AdmissionSettings = request.app.state.settings.admission
    if not admission_settings.enabled:
        return
    if request.url.path in admission_settings.exempt_paths:
        return

    controller = get_admission_controller(request)
    client_id = client_id_for(request)
    result = controller.check(client_id)

    if result.allowed:
        logger.debug(
            "admission.allowed",
            extra={
                "client_hash": fingerprint(client_id),
                "limit": result.limit,
                "remaining": result.remaining,
            },
        )
        return

    logger.warning(
        "admission.rejected",
        extra={
            "client_hash": fingerprint(client_id),
            "reason": result.reason,
            "limit": result.limit,
            "retry_after_s": result.retry_after_seconds,
            "request_path": request.url.path,
        },
    )

    headers = _rejection_headers(result) if admission_settings.include_headers else None

    if result.reason == BLOCKED:
        raise BlockedAppError(
            code="client_blocked",
            message="Too many failed authentication attempts. Try again later.",
            details={"retry_after": result.retry_after_seconds or 0},
            headers=headers,
        )

    raise RateLimitedAppError(
        code="rate_limited",
        message="Rate limit exceeded. Try again later.",
        details={
            "limit": result.limit,
            "remaining": result.remaining,
            "retry_after": result.retry_after_seconds or 0,
        },
        headers=headers,
    )
