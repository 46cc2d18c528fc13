"""HTTP middleware for request correlation and admission control.

``request_id_middleware``:
- Accepts incoming X-Request-ID header or generates a UUID
- Stores request_id in contextvars for access throughout the request lifecycle
- Injects request_id and total duration into response headers
- Counts every response in ``app.state.request_stats`` and logs one
  ``http.request`` line (client address hashed by the logging filter)

``admission_middleware``:
- Runs the per-client admission check once per request, before routing
- Answers 429 (rate limited) or 403 (locked out) with the standard error body

Usage:
    app.middleware("http")(admission_middleware)
    app.middleware("http")(request_id_middleware)  # registered last = outermost
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request, Response

from catalog_api.core.admission import admit_request, client_id_for
from catalog_api.core.config import settings
from catalog_api.core.errors import AppError
from catalog_api.core.exception_handlers import build_error_response
from catalog_api.core.logging import clear_request_id, set_request_id
from catalog_api.core.metrics import RequestStats

logger = logging.getLogger(__name__)


async def request_id_middleware(request: Request, call_next) -> Response:
    """HTTP middleware for request ID generation and propagation.

    If the client provides an X-Request-ID header (configurable via
    LOG_REQUEST_ID_HEADER), that value is used. Otherwise, a new UUID is
    generated. The ID is propagated back in the response headers and stored
    in contextvars for log correlation.

    Args:
        request: The incoming HTTP request object.
        call_next: The next middleware/route handler in the stack.

    Returns:
        Response: The response from the next handler with request_id and
            duration headers added.
    """

    state = request.app.state
    app_settings = getattr(state, "settings", settings)
    request_stats: RequestStats | None = getattr(state, "request_stats", None)
    header_name = app_settings.log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)
    start = time.perf_counter()
    status_code = 500
    try:
        response: Response = await call_next(request)
        status_code = response.status_code
    finally:
        duration_ms = (time.perf_counter() - start) * 1000
        if request_stats is not None:
            request_stats.record(status_code, duration_ms)
        logger.info(
            "http.request",
            extra={
                "method": request.method,
                "request_path": request.url.path,
                "status_code": status_code,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_id_for(request),
            },
        )
        clear_request_id()

    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    return response


async def admission_middleware(request: Request, call_next) -> Response:
    """Reject requests from clients over their window or under lockout."""

    try:
        admit_request(request)
    except AppError as exc:
        return build_error_response(exc)
    return await call_next(request)
