"""Product review routes.

Listing is public; writing, editing and deleting a review require an
authenticated caller, and edits are limited to the review's author.
"""

from __future__ import annotations

from fastapi import APIRouter, Query, Request, status

from catalog_api.core.auth import CurrentIdentity
from catalog_api.schemas.products import MessageResponse
from catalog_api.schemas.reviews import ReviewCreate, ReviewListResponse, ReviewResponse, ReviewUpdate
from catalog_api.services.review_service import ReviewService

router = APIRouter(tags=["Reviews"])


def _review_service(request: Request) -> ReviewService:
    return request.app.state.review_service


@router.get("/products/{product_id}/reviews", response_model=ReviewListResponse)
async def list_reviews(
    product_id: int,
    request: Request,
    page: int = Query(1, description="1-based page number."),
    limit: int | None = Query(None, description="Items per page (capped at the configured maximum)."),
) -> ReviewListResponse:
    """List a product's reviews, newest first, with its rating summary."""
    result = _review_service(request).list_reviews(product_id, page=page, limit=limit)
    return ReviewListResponse.model_validate(result, from_attributes=True)


@router.post(
    "/products/{product_id}/reviews",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_review(
    product_id: int,
    payload: ReviewCreate,
    request: Request,
    identity: CurrentIdentity,
) -> ReviewResponse:
    review = _review_service(request).create_review(product_id, identity.user_id, payload)
    return ReviewResponse.model_validate(review)


@router.get("/products/{product_id}/reviews/{review_id}", response_model=ReviewResponse)
async def get_review(product_id: int, review_id: int, request: Request) -> ReviewResponse:
    review = _review_service(request).get_review(product_id, review_id)
    return ReviewResponse.model_validate(review)


@router.put("/products/{product_id}/reviews/{review_id}", response_model=ReviewResponse)
async def update_review(
    product_id: int,
    review_id: int,
    payload: ReviewUpdate,
    request: Request,
    identity: CurrentIdentity,
) -> ReviewResponse:
    """Change rating and/or comment of one's own review.

    Raises:
        PermissionAppError: 403 when the caller did not write the review.
    """
    review = _review_service(request).update_review(product_id, review_id, identity.user_id, payload)
    return ReviewResponse.model_validate(review)


@router.delete("/products/{product_id}/reviews/{review_id}", response_model=MessageResponse)
async def delete_review(
    product_id: int,
    review_id: int,
    request: Request,
    identity: CurrentIdentity,
) -> MessageResponse:
    _review_service(request).delete_review(product_id, review_id, identity.user_id)
    return MessageResponse(message="Review deleted successfully")
