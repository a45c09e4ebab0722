"""Review API endpoints, standalone and nested under tours."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from src.api.dependencies import CurrentUser, get_review_service, restrict_to
from src.models.enums import Role
from src.models.user import User
from src.schemas.review import ReviewCreate, ReviewResponse, ReviewUpdate
from src.services.review_service import ReviewService

router = APIRouter(prefix="/api/v1/reviews", tags=["reviews"])
tour_reviews_router = APIRouter(prefix="/api/v1/tours/{tour_id}/reviews", tags=["reviews"])

Reviews = Annotated[ReviewService, Depends(get_review_service)]
Reviewer = Annotated[User, Depends(restrict_to(Role.USER))]
ReviewEditor = Annotated[User, Depends(restrict_to(Role.USER, Role.ADMIN))]


@router.get("", response_model=list[ReviewResponse])
async def get_reviews(current_user: CurrentUser, reviews: Reviews, tour_id: int | None = None):
    """List reviews, optionally for one tour."""
    return reviews.list_reviews(tour_id)


@router.post("", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
async def create_review(payload: ReviewCreate, reviewer: Reviewer, reviews: Reviews):
    """Review a tour given in the body as ``tour_id``."""
    return reviews.create(reviewer, payload)


@router.get("/{review_id}", response_model=ReviewResponse)
async def get_review(review_id: int, current_user: CurrentUser, reviews: Reviews):
    return reviews.get(review_id)


@router.patch("/{review_id}", response_model=ReviewResponse)
async def update_review(
    review_id: int, payload: ReviewUpdate, editor: ReviewEditor, reviews: Reviews
):
    """Update a review (its author, or an admin)."""
    return reviews.update(reviews.get(review_id), editor, payload)


@router.delete("/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_review(review_id: int, editor: ReviewEditor, reviews: Reviews):
    """Delete a review (its author, or an admin)."""
    reviews.delete(reviews.get(review_id), editor)


@tour_reviews_router.get("", response_model=list[ReviewResponse])
async def get_tour_reviews(tour_id: int, current_user: CurrentUser, reviews: Reviews):
    """List the reviews of one tour."""
    return reviews.list_reviews(tour_id)


@tour_reviews_router.post("", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
async def create_tour_review(
    tour_id: int, payload: ReviewCreate, reviewer: Reviewer, reviews: Reviews
):
    """Review the tour in the URL."""
    return reviews.create(reviewer, payload, tour_id=tour_id)
