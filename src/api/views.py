"""Page endpoints.

These return the data a server-rendered page would be built from. Errors on
these paths use the page error shape (see ``src.api.errors``).
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import select

from src.api.dependencies import CurrentUser, OptionalUser, get_tour_service
from src.errors import NotFoundError
from src.models.booking import Booking
from src.models.tour import Tour
from src.models.user import User
from src.schemas.auth import UserResponse
from src.schemas.tour import TourDetailResponse, TourResponse
from src.services.tour_service import TourService

router = APIRouter(tags=["views"])

Tours = Annotated[TourService, Depends(get_tour_service)]


def page_user(user: User | None) -> dict | None:
    return UserResponse.model_validate(user).model_dump(mode="json") if user else None


@router.get("/")
async def get_overview(user: OptionalUser, tours: Tours):
    """All tours, plus the visitor if logged in."""
    all_tours = tours.visible().order_by(Tour.id).all()
    return {
        "title": "All Tours",
        "tours": [TourResponse.model_validate(t).model_dump(mode="json") for t in all_tours],
        "user": page_user(user),
    }


@router.get("/tour/{slug}")
async def get_tour_page(slug: str, user: OptionalUser, tours: Tours):
    """One tour by slug, with reviews."""
    tour = tours.get_by_slug(slug)
    if tour is None:
        raise NotFoundError("There is no tour with that name.")
    return {
        "title": f"{tour.name} Tour",
        "tour": TourDetailResponse.model_validate(tour).model_dump(mode="json"),
        "user": page_user(user),
    }


@router.get("/me")
async def get_account(current_user: CurrentUser):
    """Account page of the logged-in user."""
    return {"title": "Your account", "user": page_user(current_user)}


@router.get("/my-tours")
async def get_my_tours(current_user: CurrentUser, tours: Tours):
    """Tours the logged-in user has booked."""
    tour_ids = select(Booking.tour_id).where(Booking.user_id == current_user.id)
    booked = tours.visible().filter(Tour.id.in_(tour_ids)).order_by(Tour.id).all()
    return {
        "title": "My Tours",
        "tours": [TourResponse.model_validate(t).model_dump(mode="json") for t in booked],
        "user": page_user(current_user),
    }
