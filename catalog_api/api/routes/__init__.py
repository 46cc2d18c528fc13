from __future__ import annotations

from catalog_api.api.routes.health import router as health_router
from catalog_api.api.routes.products import router as products_router
from catalog_api.api.routes.reviews import router as reviews_router
from catalog_api.api.routes.users import router as users_router

__all__ = ["health_router", "products_router", "reviews_router", "users_router"]
