"""Product reviews: creation, listing with a rating summary, owner-only edits."""

from __future__ import annotations

import logging
from typing import Any

from catalog_api.adapters.reviews.base import AbstractReviewStore, Review
from catalog_api.core.errors import NotFoundAppError, PermissionAppError
from catalog_api.schemas.reviews import ReviewCreate, ReviewUpdate
from catalog_api.services.pagination import clamp_page, pagination_meta
from catalog_api.services.product_service import ProductService
from catalog_api.utils.sanitizer import clean_string

logger = logging.getLogger(__name__)


class ReviewService:
    """Review orchestration over an AbstractReviewStore.

    Every operation first resolves the product, so reviews of a missing
    product answer 404 ``product_not_found``. Only the author of a review may
    change or delete it.
    """

    def __init__(
        self,
        store: AbstractReviewStore,
        products: ProductService,
        *,
        max_page_size: int = 100,
        default_page_size: int = 50,
    ) -> None:
        self._store = store
        self._products = products
        self._max_page_size = max_page_size
        self._default_page_size = default_page_size

    def create_review(self, product_id: int, user_id: int | str, payload: ReviewCreate) -> Review:
        self._products.get_product(product_id)

        review = self._store.create(
            product_id=product_id,
            user_id=user_id,
            rating=payload.rating,
            comment=clean_string(payload.comment) or None,
        )
        logger.info(
            "reviews.created",
            extra={"review_id": review.id, "product_id": product_id, "user_id": user_id},
        )
        return review

    def list_reviews(self, product_id: int, *, page: int | None, limit: int | None) -> dict[str, Any]:
        """Return newest-first reviews, the rating summary and pagination."""
        self._products.get_product(product_id)

        page, limit = clamp_page(
            page,
            limit,
            default_limit=self._default_page_size,
            max_limit=self._max_page_size,
        )
        reviews, total = self._store.list_for_product(
            product_id,
            offset=(page - 1) * limit,
            limit=limit,
        )
        return {
            "reviews": reviews,
            "rating_summary": self._store.rating_summary(product_id),
            "pagination": pagination_meta(page, limit, total),
        }

    def get_review(self, product_id: int, review_id: int) -> Review:
        self._products.get_product(product_id)

        review = self._store.get(review_id)
        if review is None or review.product_id != product_id:
            raise NotFoundAppError(
                code="review_not_found",
                message="Review not found",
                details={"product_id": product_id, "review_id": review_id},
            )
        return review

    def update_review(
        self,
        product_id: int,
        review_id: int,
        user_id: int | str,
        payload: ReviewUpdate,
    ) -> Review:
        review = self._owned_review(product_id, review_id, user_id)

        data = payload.model_dump(exclude_unset=True)
        comment = clean_string(data["comment"]) if data.get("comment") is not None else None
        updated = self._store.update(review.id, rating=data.get("rating"), comment=comment)
        if updated is None:
            return self.get_review(product_id, review_id)

        logger.info("reviews.updated", extra={"review_id": review_id, "fields": sorted(data)})
        return updated

    def delete_review(self, product_id: int, review_id: int, user_id: int | str) -> Review:
        review = self._owned_review(product_id, review_id, user_id)

        if self._store.delete(review.id) is None:
            return self.get_review(product_id, review_id)

        logger.info("reviews.deleted", extra={"review_id": review_id, "product_id": product_id})
        return review

    def count(self) -> int:
        return self._store.count()

    def _owned_review(self, product_id: int, review_id: int, user_id: int | str) -> Review:
        review = self.get_review(product_id, review_id)
        if review.user_id != user_id:
            raise PermissionAppError(
                code="not_review_owner",
                message="Only the author of a review can change it",
                details={"review_id": review_id},
            )
        return review
