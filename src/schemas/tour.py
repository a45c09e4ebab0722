"""Tour schemas."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.models.enums import Difficulty, Role


class PointIn(BaseModel):
    """GeoJSON-style point; coordinates are ``[longitude, latitude]``."""

    type: str = Field("Point", pattern="^Point$")
    coordinates: list[float] = Field(..., min_length=2, max_length=2)
    address: str | None = Field(None, max_length=255)
    description: str | None = Field(None, max_length=255)

    @field_validator("coordinates")
    @classmethod
    def valid_coordinates(cls, value: list[float]) -> list[float]:
        lng, lat = value
        if not -180 <= lng <= 180 or not -90 <= lat <= 90:
            raise ValueError("Coordinates must be [longitude, latitude] within range")
        return value


class LocationIn(PointIn):
    """A stop on the tour."""

    day: int | None = Field(None, ge=1)


class TourBase(BaseModel):
    """Fields shared by create and update."""

    duration: int | None = Field(None, gt=0)
    max_group_size: int | None = Field(None, gt=0)
    difficulty: Difficulty | None = None
    ratings_average: float | None = Field(None, ge=1, le=5)
    ratings_quantity: int | None = Field(None, ge=0)
    price: float | None = Field(None, ge=0)
    price_discount: float | None = Field(None, ge=0)
    summary: str | None = Field(None, max_length=500)
    description: str | None = None
    image_cover: str | None = Field(None, max_length=255)
    images: list[str] | None = None
    start_dates: list[date] | None = None
    secret_tour: bool | None = None
    start_location: PointIn | None = None
    locations: list[LocationIn] | None = None
    guides: list[int] | None = None

    @field_validator("summary", "description")
    @classmethod
    def strip_text(cls, value: str | None) -> str | None:
        return value.strip() if value else value

    @field_validator("ratings_average")
    @classmethod
    def round_rating(cls, value: float | None) -> float | None:
        return round(value, 1) if value is not None else value


class TourCreate(TourBase):
    """Create a new tour."""

    name: str = Field(..., min_length=10, max_length=40)
    duration: int = Field(..., gt=0)
    max_group_size: int = Field(..., gt=0)
    difficulty: Difficulty
    price: float = Field(..., ge=0)
    summary: str = Field(..., min_length=1, max_length=500)
    image_cover: str = Field(..., max_length=255)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value


class TourUpdate(TourBase):
    """Update a tour."""

    name: str | None = Field(None, min_length=10, max_length=40)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value


class PointOut(BaseModel):
    type: str = "Point"
    coordinates: list[float]
    address: str | None = None
    description: str | None = None


class LocationOut(PointOut):
    day: int | None = None


class GuideResponse(BaseModel):
    """Guide as embedded in a tour."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    photo: str
    role: Role


class TourReviewResponse(BaseModel):
    """Review as embedded in a tour."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    review: str
    rating: int
    user_id: int
    created_at: datetime


class TourResponse(BaseModel):
    """Tour response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    duration: int
    duration_weeks: float
    max_group_size: int
    difficulty: Difficulty
    ratings_average: float
    ratings_quantity: int
    price: float
    price_discount: float | None
    summary: str
    description: str | None
    image_cover: str
    images: list[str]
    start_dates: list[date]
    start_location: PointOut | None
    locations: list[LocationOut]
    guides: list[GuideResponse]
    created_at: datetime


class TourDetailResponse(TourResponse):
    """Tour with its reviews."""

    reviews: list[TourReviewResponse] = []


class TourStats(BaseModel):
    """Aggregate figures for one difficulty level."""

    difficulty: Difficulty
    num_tours: int
    num_ratings: int
    avg_rating: float
    avg_price: float
    min_price: float
    max_price: float


class MonthlyPlan(BaseModel):
    """Tour starts in one month."""

    month: int
    num_tour_starts: int
    tours: list[str]
