"""Product catalog service: validation, sanitization and pagination.

Handlers stay thin; this service turns raw payloads into clean store calls:
- Required-field and price-format validation (errors collected, not first-fail)
- HTML/markup stripping on free-text fields
- Page/limit clamping with a hard page-size cap
"""

from __future__ import annotations

import logging
from typing import Any

from catalog_api.adapters.products.base import AbstractProductStore, Product
from catalog_api.adapters.reviews.base import AbstractReviewStore
from catalog_api.core.errors import NotFoundAppError, ValidationAppError
from catalog_api.schemas.products import ProductCreate, ProductUpdate
from catalog_api.services.pagination import clamp_page, pagination_meta
from catalog_api.utils.sanitizer import clean_price, clean_string, is_valid_price

logger = logging.getLogger(__name__)


def validate_product_data(data: dict[str, Any], required_fields: tuple[str, ...] = ("name", "price")) -> list[str]:
    """Collect validation errors for a product payload.

    Args:
        data: Payload fields (None means "not provided").
        required_fields: Fields that must be present and non-blank.

    Returns:
        List of human-readable error messages (empty when valid).
    """
    errors: list[str] = []

    for field in required_fields:
        value = data.get(field)
        if value is None or not str(value).strip():
            errors.append(f"{field} is required")

    # A provided price is checked even when blank; only an absent one skips.
    price = data.get("price")
    if price is not None and "price is required" not in errors and not is_valid_price(price):
        errors.append("Price must be a valid number")

    return errors


def _raise_if_invalid(errors: list[str]) -> None:
    if errors:
        raise ValidationAppError(
            code="invalid_product",
            message="Product payload failed validation",
            details={"errors": errors},
        )


class ProductService:
    """CRUD orchestration over an AbstractProductStore."""

    def __init__(
        self,
        store: AbstractProductStore,
        *,
        reviews: AbstractReviewStore | None = None,
        max_page_size: int = 100,
        default_page_size: int = 10,
    ) -> None:
        self._store = store
        self._reviews = reviews
        self._max_page_size = max_page_size
        self._default_page_size = default_page_size

    def list_products(self, *, search: str | None, page: int | None, limit: int | None) -> dict[str, Any]:
        """Return one page of products plus pagination metadata."""
        page, limit = clamp_page(
            page,
            limit,
            default_limit=self._default_page_size,
            max_limit=self._max_page_size,
        )
        search_term = search.strip() if search and search.strip() else None

        products, total = self._store.list_page(
            search=search_term,
            offset=(page - 1) * limit,
            limit=limit,
        )
        return {
            "products": products,
            "pagination": pagination_meta(page, limit, total),
        }

    def get_product(self, product_id: int) -> Product:
        product = self._store.get(product_id)
        if product is None:
            raise NotFoundAppError(
                code="product_not_found",
                message="Product not found",
                details={"product_id": product_id},
            )
        return product

    def create_product(self, payload: ProductCreate) -> Product:
        _raise_if_invalid(validate_product_data(payload.model_dump()))

        name = clean_string(payload.name)
        if not name:
            _raise_if_invalid(["name is required"])

        product = self._store.create(
            name=name,
            price=clean_price(payload.price),
            category=clean_string(payload.category) or None,
            stock=payload.stock,
        )
        logger.info("products.created", extra={"product_id": product.id})
        return product

    def update_product(self, product_id: int, payload: ProductUpdate) -> Product:
        self.get_product(product_id)

        data = payload.model_dump(exclude_unset=True)
        _raise_if_invalid(validate_product_data(data, required_fields=()))

        # Blank names are ignored rather than wiping the stored name.
        name = clean_string(data.get("name")) or None
        price = clean_price(data["price"]) if data.get("price") is not None else None
        category = clean_string(data["category"]) if data.get("category") is not None else None

        product = self._store.update(
            product_id,
            name=name,
            price=price,
            category=category,
            stock=data.get("stock"),
        )
        if product is None:
            # Deleted concurrently between the existence check and the update.
            return self.get_product(product_id)

        logger.info("products.updated", extra={"product_id": product_id, "fields": sorted(data)})
        return product

    def delete_product(self, product_id: int) -> Product:
        product = self._store.delete(product_id)
        if product is None:
            return self.get_product(product_id)
        # Reviews go with their product.
        removed_reviews = self._reviews.delete_for_product(product_id) if self._reviews else 0
        logger.info("products.deleted", extra={"product_id": product_id, "reviews_removed": removed_reviews})
        return product

    def count(self) -> int:
        return self._store.count()
