from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Health check endpoint.

    Returns a simple status response to verify the API is operational.
    Used by load balancers and monitoring systems to determine service health.
    Exempt from admission control by default.

    Returns:
        dict: A dictionary with a single "status" key set to "ok".
    """

    return {"status": "ok"}


@router.get("/metrics")
def metrics(request: Request) -> dict:
    """Operational counters: traffic, admission decisions and catalog size.

    Client identifiers never appear here, only aggregate counts.
    """

    state = request.app.state
    return {
        "requests": state.request_stats.snapshot(),
        "admission": state.admission.stats(),
        "products": state.product_service.count(),
        "reviews": state.review_service.count(),
        "users": state.users.count(),
    }
