"""Booking API endpoints (admins and lead guides)."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from src.api.dependencies import DbSession, get_tour_service, restrict_to
from src.database import commit
from src.errors import NotFoundError
from src.models.booking import Booking
from src.models.enums import Role
from src.models.user import User
from src.schemas.booking import BookingCreate, BookingResponse, BookingUpdate
from src.services.auth import get_user_by_id
from src.services.tour_service import TourService

router = APIRouter(prefix="/api/v1/bookings", tags=["bookings"])

BookingManager = Annotated[User, Depends(restrict_to(Role.ADMIN, Role.LEAD_GUIDE))]


def get_booking_or_404(db: Session, booking_id: int) -> Booking:
    booking = db.query(Booking).filter(Booking.id == booking_id).first()
    if booking is None:
        raise NotFoundError()
    return booking


@router.get("", response_model=list[BookingResponse])
async def get_bookings(manager: BookingManager, db: DbSession, user_id: int | None = None):
    """List bookings, optionally for one user."""
    query = db.query(Booking)
    if user_id is not None:
        query = query.filter(Booking.user_id == user_id)
    return query.order_by(Booking.created_at.desc(), Booking.id.desc()).all()


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: BookingCreate,
    manager: BookingManager,
    db: DbSession,
    tours: Annotated[TourService, Depends(get_tour_service)],
):
    """Book a tour for a user. Price defaults to the tour's current price."""
    tour = tours.get(payload.tour_id)
    if get_user_by_id(db, payload.user_id) is None:
        raise NotFoundError("No user found with that ID")

    booking = Booking(
        tour_id=tour.id,
        user_id=payload.user_id,
        price=payload.price if payload.price is not None else tour.price,
        paid=payload.paid,
    )
    db.add(booking)
    commit(db, booking)
    db.refresh(booking)
    return booking


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(booking_id: int, manager: BookingManager, db: DbSession):
    return get_booking_or_404(db, booking_id)


@router.patch("/{booking_id}", response_model=BookingResponse)
async def update_booking(
    booking_id: int, payload: BookingUpdate, manager: BookingManager, db: DbSession
):
    booking = get_booking_or_404(db, booking_id)
    if payload.price is not None:
        booking.price = payload.price
    if payload.paid is not None:
        booking.paid = payload.paid
    commit(db, booking)
    db.refresh(booking)
    return booking


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_booking(booking_id: int, manager: BookingManager, db: DbSession):
    booking = get_booking_or_404(db, booking_id)
    db.delete(booking)
    commit(db)
