"""Tour model and the tour/guide association."""

import re

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Float,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    false,
)
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.enums import Difficulty
from src.models.mixins import TimestampMixin

tour_guides = Table(
    "tour_guides",
    Base.metadata,
    Column("tour_id", Integer, ForeignKey("tours.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


def slugify(value: str) -> str:
    """Lowercase, hyphen-separated URL slug."""
    slug = re.sub(r"[^\w\s-]", "", value.lower())
    return re.sub(r"[\s_-]+", "-", slug).strip("-")


class Tour(Base, TimestampMixin):
    """Bookable tour."""

    __tablename__ = "tours"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(40), unique=True, nullable=False)
    slug = Column(String(80), nullable=False, index=True)
    duration = Column(Integer, nullable=False)  # days
    max_group_size = Column(Integer, nullable=False)
    difficulty = Column(
        SQLAlchemyEnum(
            Difficulty, name="tour_difficulty", values_callable=lambda e: [d.value for d in e]
        ),
        nullable=False,
    )
    ratings_average = Column(Float, nullable=False, default=4.5)
    ratings_quantity = Column(Integer, nullable=False, default=0)
    price = Column(Float, nullable=False, index=True)
    price_discount = Column(Float, nullable=True)
    summary = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    image_cover = Column(String(255), nullable=False)
    images = Column(JSON, nullable=False, default=list)
    start_dates = Column(JSON, nullable=False, default=list)  # ISO dates
    secret_tour = Column(Boolean, nullable=False, default=False, server_default=false())

    # GeoJSON-like start point, stored as plain columns
    start_latitude = Column(Float, nullable=True)
    start_longitude = Column(Float, nullable=True)
    start_address = Column(String(255), nullable=True)
    start_description = Column(String(255), nullable=True)
    locations = Column(JSON, nullable=False, default=list)

    # Relationships
    guides = relationship("User", secondary=tour_guides, backref="guided_tours")
    reviews = relationship("Review", back_populates="tour", cascade="all, delete-orphan")
    bookings = relationship("Booking", back_populates="tour", cascade="all, delete-orphan")

    @property
    def duration_weeks(self) -> float:
        return self.duration / 7

    def set_name(self, name: str) -> None:
        """Set the name and keep the slug in step."""
        self.name = name
        self.slug = slugify(name)

    @property
    def start_location(self) -> dict | None:
        if self.start_latitude is None or self.start_longitude is None:
            return None
        return {
            "type": "Point",
            "coordinates": [self.start_longitude, self.start_latitude],
            "address": self.start_address,
            "description": self.start_description,
        }

    def set_start_location(self, point: dict | None) -> None:
        """Store a ``{"coordinates": [lng, lat], ...}`` point, or clear it."""
        point = point or {}
        lng, lat = point.get("coordinates") or (None, None)
        self.start_longitude = lng
        self.start_latitude = lat
        self.start_address = point.get("address")
        self.start_description = point.get("description")
