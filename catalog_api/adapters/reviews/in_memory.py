"""In-memory review store (per-process, non-persistent)."""

from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime, timezone

from catalog_api.adapters.reviews.base import AbstractReviewStore, RatingSummary, Review


class InMemoryReviewStore(AbstractReviewStore):
    """Lock-guarded review store returning copies of stored reviews."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._next_id = 1
        self._reviews: dict[int, Review] = {}

    def create(self, *, product_id: int, user_id: int | str, rating: int, comment: str | None = None) -> Review:
        now = datetime.now(timezone.utc)
        with self._lock:
            review = Review(
                id=self._next_id,
                product_id=product_id,
                user_id=user_id,
                rating=rating,
                comment=comment,
                created_at=now,
                updated_at=now,
            )
            self._reviews[review.id] = review
            self._next_id += 1
            return replace(review)

    def get(self, review_id: int) -> Review | None:
        with self._lock:
            review = self._reviews.get(review_id)
            return replace(review) if review else None

    def list_for_product(self, product_id: int, *, offset: int = 0, limit: int = 50) -> tuple[list[Review], int]:
        with self._lock:
            matching = [r for r in self._reviews.values() if r.product_id == product_id]

        # Ids grow with creation time, so descending id is newest first.
        matching.sort(key=lambda r: r.id, reverse=True)
        page = [replace(r) for r in matching[offset:offset + limit]]
        return page, len(matching)

    def rating_summary(self, product_id: int) -> RatingSummary:
        with self._lock:
            ratings = [r.rating for r in self._reviews.values() if r.product_id == product_id]

        if not ratings:
            return RatingSummary(total_reviews=0, average_rating=0)
        return RatingSummary(
            total_reviews=len(ratings),
            average_rating=round(sum(ratings) / len(ratings), 2),
        )

    def update(self, review_id: int, *, rating: int | None = None, comment: str | None = None) -> Review | None:
        with self._lock:
            review = self._reviews.get(review_id)
            if review is None:
                return None
            if rating is not None:
                review.rating = rating
            if comment is not None:
                review.comment = comment
            review.updated_at = datetime.now(timezone.utc)
            return replace(review)

    def delete(self, review_id: int) -> Review | None:
        with self._lock:
            return self._reviews.pop(review_id, None)

    def delete_for_product(self, product_id: int) -> int:
        with self._lock:
            doomed = [rid for rid, r in self._reviews.items() if r.product_id == product_id]
            for rid in doomed:
                del self._reviews[rid]
        return len(doomed)

    def count(self) -> int:
        with self._lock:
            return len(self._reviews)
