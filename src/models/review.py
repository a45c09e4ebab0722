"""Review model."""

from sqlalchemy import Column, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import backref, relationship

from src.database import Base
from src.models.mixins import TimestampMixin


class Review(Base, TimestampMixin):
    """A user's rating of a tour. One review per user per tour."""

    __tablename__ = "reviews"
    __table_args__ = (UniqueConstraint("tour_id", "user_id", name="uq_reviews_tour_user"),)

    id = Column(Integer, primary_key=True, index=True)
    review = Column(Text, nullable=False)
    rating = Column(Integer, nullable=False)
    tour_id = Column(Integer, ForeignKey("tours.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Relationships
    tour = relationship("Tour", back_populates="reviews")
    user = relationship("User", backref=backref("reviews", cascade="all, delete-orphan"))
