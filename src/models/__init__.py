"""SQLAlchemy models."""

from src.models.booking import Booking
from src.models.review import Review
from src.models.tour import Tour, tour_guides
from src.models.user import User

__all__ = [
    "User",
    "Tour",
    "tour_guides",
    "Review",
    "Booking",
]
