"""Pydantic schemas for product reviews."""

from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from catalog_api.schemas.products import Pagination


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5, description="Star rating from 1 to 5.")
    comment: str | None = Field(default=None, max_length=2000)


class ReviewUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    rating: int | None = Field(default=None, ge=1, le=5)
    comment: str | None = Field(default=None, max_length=2000)


class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    user_id: int | str
    rating: int
    comment: str | None = None
    created_at: datetime
    updated_at: datetime


class RatingSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_reviews: int
    average_rating: float


class ReviewListResponse(BaseModel):
    reviews: List[ReviewResponse]
    rating_summary: RatingSummaryResponse
    pagination: Pagination
