"""Product catalog routes.

Reads are public; create, update and delete require an authenticated caller.
"""

from __future__ import annotations

from fastapi import APIRouter, Query, Request, status

from catalog_api.core.auth import CurrentIdentity
from catalog_api.schemas.products import (
    MessageResponse,
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
)
from catalog_api.services.product_service import ProductService

router = APIRouter(tags=["Products"])


def _product_service(request: Request) -> ProductService:
    return request.app.state.product_service


@router.get("/products", response_model=ProductListResponse)
async def list_products(
    request: Request,
    search: str | None = Query(None, description="Case-insensitive match on name or category."),
    page: int = Query(1, description="1-based page number."),
    limit: int | None = Query(None, description="Items per page (capped at the configured maximum)."),
) -> ProductListResponse:
    """List products with optional search and pagination."""
    result = _product_service(request).list_products(search=search, page=page, limit=limit)
    return ProductListResponse.model_validate(result, from_attributes=True)


@router.post(
    "/products",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_product(
    payload: ProductCreate,
    request: Request,
    identity: CurrentIdentity,
) -> ProductResponse:
    """Create a product. Name and price are required; text is sanitized.

    Raises:
        ValidationAppError: 400 with the list of validation errors.
    """
    product = _product_service(request).create_product(payload)
    return ProductResponse.model_validate(product)


@router.get("/products/{product_id}", response_model=ProductResponse)
async def get_product(product_id: int, request: Request) -> ProductResponse:
    product = _product_service(request).get_product(product_id)
    return ProductResponse.model_validate(product)


@router.put("/products/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: int,
    payload: ProductUpdate,
    request: Request,
    identity: CurrentIdentity,
) -> ProductResponse:
    """Partially update a product; omitted fields stay unchanged."""
    product = _product_service(request).update_product(product_id, payload)
    return ProductResponse.model_validate(product)


@router.delete("/products/{product_id}", response_model=MessageResponse)
async def delete_product(
    product_id: int,
    request: Request,
    identity: CurrentIdentity,
) -> MessageResponse:
    _product_service(request).delete_product(product_id)
    return MessageResponse(message="Product deleted successfully")
