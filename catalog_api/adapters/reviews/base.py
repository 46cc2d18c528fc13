"""Review store interface.

Reviews belong to a product and to the user who wrote them; ownership is
enforced by the service layer, not the store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass
class Review:
    id: int
    product_id: int
    user_id: int | str
    rating: int
    comment: str | None
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class RatingSummary:
    total_reviews: int
    average_rating: float


class AbstractReviewStore(ABC):
    """Interface for review persistence."""

    @abstractmethod
    def create(self, *, product_id: int, user_id: int | str, rating: int, comment: str | None = None) -> Review:
        raise NotImplementedError

    @abstractmethod
    def get(self, review_id: int) -> Review | None:
        raise NotImplementedError

    @abstractmethod
    def list_for_product(self, product_id: int, *, offset: int = 0, limit: int = 50) -> tuple[list[Review], int]:
        """Return one page of a product's reviews (newest first) and the total."""
        raise NotImplementedError

    @abstractmethod
    def rating_summary(self, product_id: int) -> RatingSummary:
        raise NotImplementedError

    @abstractmethod
    def update(self, review_id: int, *, rating: int | None = None, comment: str | None = None) -> Review | None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, review_id: int) -> Review | None:
        raise NotImplementedError

    @abstractmethod
    def delete_for_product(self, product_id: int) -> int:
        """Drop every review of a product; returns how many were removed."""
        raise NotImplementedError

    @abstractmethod
    def count(self) -> int:
        raise NotImplementedError
