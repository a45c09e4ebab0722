"""Review schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ReviewCreate(BaseModel):
    """Create a review. ``tour_id`` may come from the URL instead."""

    review: str = Field(..., min_length=1, max_length=5000)
    rating: int = Field(..., ge=1, le=5)
    tour_id: int | None = None


class ReviewUpdate(BaseModel):
    """Update a review."""

    review: str | None = Field(None, min_length=1, max_length=5000)
    rating: int | None = Field(None, ge=1, le=5)


class ReviewAuthor(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    photo: str


class ReviewResponse(BaseModel):
    """Review response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    review: str
    rating: int
    tour_id: int
    user_id: int
    user: ReviewAuthor
    created_at: datetime
