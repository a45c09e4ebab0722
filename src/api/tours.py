"""Tour API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status

from src.api.dependencies import get_tour_service, restrict_to
from src.models.enums import Role
from src.models.tour import Tour
from src.models.user import User
from src.schemas.tour import (
    MonthlyPlan,
    TourCreate,
    TourDetailResponse,
    TourResponse,
    TourStats,
    TourUpdate,
)
from src.services.query import QueryFeatures
from src.services.tour_service import TOP_CHEAP_ALIAS, TourService

router = APIRouter(prefix="/api/v1/tours", tags=["tours"])

Tours = Annotated[TourService, Depends(get_tour_service)]
TourManager = Annotated[User, Depends(restrict_to(Role.ADMIN, Role.LEAD_GUIDE))]
TourStaff = Annotated[User, Depends(restrict_to(Role.ADMIN, Role.LEAD_GUIDE, Role.GUIDE))]


def serialize_tours(tours: list[Tour], features: QueryFeatures) -> list[dict]:
    """Dump tours to JSON-ready dicts, applying field projection."""
    return [
        features.project(TourResponse.model_validate(tour).model_dump(mode="json"))
        for tour in tours
    ]


@router.get("")
async def get_tours(request: Request, tours: Tours):
    """List tours with filtering, sorting, field selection and pagination."""
    features = QueryFeatures.from_params(request.query_params)
    return serialize_tours(tours.list_tours(features), features)


@router.get("/top-5-cheap")
async def get_top_tours(request: Request, tours: Tours):
    """Five best rated tours, cheapest first among equals."""
    features = QueryFeatures.from_params({**request.query_params, **TOP_CHEAP_ALIAS})
    return serialize_tours(tours.list_tours(features), features)


@router.get("/tour-stats", response_model=list[TourStats])
async def get_tour_stats(tours: Tours):
    """Per-difficulty statistics for highly rated tours."""
    return tours.stats()


@router.get("/monthly-plan/{year}", response_model=list[MonthlyPlan])
async def get_monthly_plan(year: int, staff: TourStaff, tours: Tours):
    """Tour starts per month of a year (guides and admins)."""
    return tours.monthly_plan(year)


@router.get(
    "/tours-within/{distance}/center/{latlng}/unit/{unit}", response_model=list[TourResponse]
)
async def get_tours_within(distance: float, latlng: str, unit: str, tours: Tours):
    """Tours starting within ``distance`` (mi or km) of ``lat,lng``."""
    return tours.within(distance, latlng, unit)


@router.get("/{tour_id}", response_model=TourDetailResponse)
async def get_tour(tour_id: int, tours: Tours):
    """Get a tour with its reviews."""
    return tours.get(tour_id)


@router.post("", response_model=TourResponse, status_code=status.HTTP_201_CREATED)
async def create_tour(payload: TourCreate, manager: TourManager, tours: Tours):
    """Create a tour (admins and lead guides)."""
    return tours.create(payload)


@router.patch("/{tour_id}", response_model=TourResponse)
async def update_tour(tour_id: int, payload: TourUpdate, manager: TourManager, tours: Tours):
    """Update a tour (admins and lead guides)."""
    return tours.update(tours.get(tour_id), payload)


@router.delete("/{tour_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tour(tour_id: int, manager: TourManager, tours: Tours):
    """Delete a tour (admins and lead guides)."""
    tours.delete(tours.get(tour_id))
