"""OpenAPI metadata and customization utilities.

Provides a helper to enrich the generated OpenAPI schema with:
- Tags metadata
- Security schemes for ``Authorization: Bearer`` and ``X-API-Token``
- Per-operation security: public reads and health endpoints are marked
  ``security: []``

This keeps documentation concerns decoupled from the app factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

PUBLIC_PATHS = ("/health", "/metrics", "/v1/users/register", "/v1/auth/token")


def _is_public(path: str, method: str) -> bool:
    if path in PUBLIC_PATHS:
        return True
    return path.startswith("/v1/products") and method == "get"


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add metadata and security."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        schema = original_openapi()

        components = schema.setdefault("components", {})
        security_schemes = components.setdefault("securitySchemes", {})
        security_schemes.setdefault(
            "BearerAuth",
            {
                "type": "http",
                "scheme": "bearer",
                "description": "API key (rk_...) or access token from POST /v1/auth/token.",
            },
        )
        security_schemes.setdefault(
            "ApiTokenHeader",
            {
                "type": "apiKey",
                "in": "header",
                "name": "X-API-Token",
                "description": "Alternative header carrying an API key or access token.",
            },
        )

        schema.setdefault("security", [{"BearerAuth": []}, {"ApiTokenHeader": []}])

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        desired_tags = [
            {"name": "Products", "description": "Catalog browsing and management."},
            {"name": "Reviews", "description": "Product ratings and comments."},
            {"name": "Users", "description": "Registration, login and identity."},
            {"name": "Health", "description": "Liveness and operational counters."},
        ]
        for tag in desired_tags:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        for path, methods in schema.get("paths", {}).items():
            for method, method_obj in methods.items():
                if isinstance(method_obj, dict) and _is_public(path, method):
                    method_obj["security"] = []

        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
