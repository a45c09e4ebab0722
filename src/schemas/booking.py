"""Booking schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class BookingCreate(BaseModel):
    """Create a booking."""

    tour_id: int
    user_id: int
    price: float | None = Field(None, ge=0)  # defaults to the tour price
    paid: bool = True


class BookingUpdate(BaseModel):
    """Update a booking."""

    price: float | None = Field(None, ge=0)
    paid: bool | None = None


class BookingResponse(BaseModel):
    """Booking response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    tour_id: int
    user_id: int
    price: float
    paid: bool
    created_at: datetime
