"""Application factory for the catalog API.

Centralizes app construction (state, middleware, handlers, routers) so tests
can build isolated apps with their own settings and in-memory stores.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from catalog_api.adapters.products import InMemoryProductStore
from catalog_api.adapters.reviews import InMemoryReviewStore
from catalog_api.adapters.users import InMemoryUserDirectory
from catalog_api.api.routes import health_router, products_router, reviews_router, users_router
from catalog_api.core.admission import build_admission_controller
from catalog_api.core.config import Settings, settings
from catalog_api.core.exception_handlers import setup_exception_handlers
from catalog_api.core.logging import configure_logging
from catalog_api.core.metrics import RequestStats
from catalog_api.core.middleware import admission_middleware, request_id_middleware
from catalog_api.core.openapi import apply_openapi_customizations
from catalog_api.core.security import CredentialVerifier
from catalog_api.services.product_service import ProductService
from catalog_api.services.review_service import ReviewService
from catalog_api.services.user_service import UserService

logger = logging.getLogger(__name__)


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        app_settings: Settings to build the app from. Defaults to the
            process-wide settings loaded from the environment.

    Returns:
        Configured FastAPI app with its own admission controller, credential
        verifier and stores attached to ``app.state``.
    """
    app_settings = app_settings or settings

    # Logging first so subsequent init logs are formatted as desired
    configure_logging(app_settings.log)

    app = FastAPI(
        title="Catalog API",
        description=(
            "Product catalog backend. Reads are public; writes require an API "
            "key or a signed access token. Every client is subject to a "
            "sliding-window request limit and a lockout after repeated "
            "authentication failures."
        ),
        version="0.1.0",
        debug=app_settings.app.debug,
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
    )

    verifier = CredentialVerifier(
        signing_secret=app_settings.auth.token_secret,
        token_ttl_seconds=app_settings.auth.token_ttl_seconds,
        api_key_prefix=app_settings.auth.api_key_prefix,
    )
    users = InMemoryUserDirectory(api_key_prefix=app_settings.auth.api_key_prefix)
    reviews = InMemoryReviewStore()

    app.state.settings = app_settings
    app.state.admission = build_admission_controller(app_settings.admission)
    app.state.verifier = verifier
    app.state.users = users
    app.state.user_service = UserService(
        users,
        verifier,
        bcrypt_rounds=app_settings.auth.bcrypt_rounds,
    )
    app.state.request_stats = RequestStats()
    app.state.product_service = ProductService(
        InMemoryProductStore(),
        reviews=reviews,
        max_page_size=app_settings.app.max_page_size,
        default_page_size=app_settings.app.default_page_size,
    )
    app.state.review_service = ReviewService(
        reviews,
        app.state.product_service,
        max_page_size=app_settings.app.max_page_size,
        default_page_size=app_settings.app.default_review_page_size,
    )

    # Middleware: the last registered runs first, so request ids wrap admission
    app.middleware("http")(admission_middleware)
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(products_router, prefix="/v1")
    app.include_router(reviews_router, prefix="/v1")
    app.include_router(users_router, prefix="/v1")
    app.include_router(health_router)

    # OpenAPI customizations (security schemes, tags, exemptions)
    apply_openapi_customizations(app)

    logger.info(
        "app.created",
        extra={
            "app_env": app_settings.app_env,
            "admission_enabled": app_settings.admission.enabled,
            "max_requests": app_settings.admission.max_requests,
            "window_seconds": app_settings.admission.window_seconds,
        },
    )
    return app
