"""Booking model."""

from sqlalchemy import Boolean, Column, Float, ForeignKey, Integer, true
from sqlalchemy.orm import backref, relationship

from src.database import Base
from src.models.mixins import TimestampMixin


class Booking(Base, TimestampMixin):
    """A user's booking of a tour at a price."""

    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    tour_id = Column(Integer, ForeignKey("tours.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    price = Column(Float, nullable=False)
    paid = Column(Boolean, nullable=False, default=True, server_default=true())

    # Relationships
    tour = relationship("Tour", back_populates="bookings")
    user = relationship("User", backref=backref("bookings", cascade="all, delete-orphan"))
