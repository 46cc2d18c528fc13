from catalog_api.adapters.reviews.base import AbstractReviewStore, RatingSummary, Review
from catalog_api.adapters.reviews.in_memory import InMemoryReviewStore

__all__ = ["AbstractReviewStore", "InMemoryReviewStore", "RatingSummary", "Review"]
