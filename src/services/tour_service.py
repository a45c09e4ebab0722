"""Tour service: CRUD, statistics and location queries."""

import logging
import math
from collections import defaultdict
from datetime import date

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from src.database import commit
from src.errors import BadRequestError, NotFoundError, ValidationError
from src.models.tour import Tour
from src.models.user import User
from src.schemas.tour import TourCreate, TourUpdate
from src.services.auth import active_users
from src.services.query import QueryFeatures

logger = logging.getLogger(__name__)

FILTERABLE_FIELDS = (
    "name",
    "slug",
    "duration",
    "max_group_size",
    "difficulty",
    "ratings_average",
    "ratings_quantity",
    "price",
    "price_discount",
    "created_at",
)

NULLABLE_FIELDS = ("price_discount", "description")

TOP_CHEAP_ALIAS = {
    "limit": "5",
    "sort": "-ratings_average,price",
    "fields": "name,price,ratings_average,summary,difficulty",
}

LATLNG_FORMAT_MESSAGE = "Please provide latitude and longitude in the format lat,lng."

# Earth radius in the requested unit
EARTH_RADIUS = {"mi": 3963.2, "km": 6378.1}


class TourService:
    """Service for tours. Secret tours are invisible to every read."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def visible(self) -> Query:
        """Query over non-secret tours."""
        return self.db.query(Tour).filter(Tour.secret_tour.is_(False))

    def list_tours(self, features: QueryFeatures) -> list[Tour]:
        """Tours matching the query-string features."""
        return features.apply(self.visible(), Tour, FILTERABLE_FIELDS).all()

    def get(self, tour_id: int) -> Tour:
        """Get a tour by id or raise NotFoundError."""
        tour = self.visible().filter(Tour.id == tour_id).first()
        if tour is None:
            raise NotFoundError()
        return tour

    def get_by_slug(self, slug: str) -> Tour | None:
        return self.visible().filter(Tour.slug == slug).first()

    def create(self, data: TourCreate) -> Tour:
        """Create a tour; slug is derived from the name."""
        tour = Tour()
        self._apply(tour, data.model_dump(exclude_unset=True))
        self.db.add(tour)
        commit(self.db, tour)
        self.db.refresh(tour)
        logger.info(f"Created tour {tour.id} ({tour.slug})")
        return tour

    def update(self, tour: Tour, data: TourUpdate) -> Tour:
        """Apply the fields that were sent."""
        self._apply(tour, data.model_dump(exclude_unset=True))
        commit(self.db, tour)
        self.db.refresh(tour)
        return tour

    def delete(self, tour: Tour) -> None:
        self.db.delete(tour)
        commit(self.db)

    def _apply(self, tour: Tour, values: dict) -> None:
        if "name" in values:
            tour.set_name(values.pop("name"))
        if "start_location" in values:
            tour.set_start_location(values.pop("start_location"))
        if "start_dates" in values:
            tour.start_dates = [d.isoformat() for d in values.pop("start_dates") or []]
        if "guides" in values:
            tour.guides = self._load_guides(values.pop("guides") or [])
        for field, value in values.items():
            if value is None:
                if field in ("images", "locations"):
                    value = []
                elif field not in NULLABLE_FIELDS:
                    continue
            setattr(tour, field, value)

        if tour.price_discount is not None and tour.price is not None:
            if tour.price_discount >= tour.price:
                raise ValidationError(
                    [f"Discount price ({tour.price_discount}) should be below regular price"]
                )

    def _load_guides(self, guide_ids: list[int]) -> list[User]:
        guides = active_users(self.db).filter(User.id.in_(guide_ids)).all()
        missing = set(guide_ids) - {g.id for g in guides}
        if missing:
            raise ValidationError([f"No user found with id {i}" for i in sorted(missing)])
        return guides

    def stats(self) -> list[dict]:
        """Per-difficulty figures over tours rated 4.5 or higher, cheapest first."""
        avg_price = func.avg(Tour.price)
        rows = (
            self.visible()
            .filter(Tour.ratings_average >= 4.5)
            .with_entities(
                Tour.difficulty,
                func.count(Tour.id),
                func.coalesce(func.sum(Tour.ratings_quantity), 0),
                func.avg(Tour.ratings_average),
                avg_price,
                func.min(Tour.price),
                func.max(Tour.price),
            )
            .group_by(Tour.difficulty)
            .order_by(avg_price)
            .all()
        )
        return [
            {
                "difficulty": difficulty,
                "num_tours": num_tours,
                "num_ratings": num_ratings,
                "avg_rating": round(avg_rating, 2),
                "avg_price": round(avg_price_value, 2),
                "min_price": min_price,
                "max_price": max_price,
            }
            for (
                difficulty,
                num_tours,
                num_ratings,
                avg_rating,
                avg_price_value,
                min_price,
                max_price,
            ) in rows
        ]

    def monthly_plan(self, year: int) -> list[dict]:
        """Tour starts per month of ``year``, busiest month first, at most 12 rows."""
        starts: dict[int, list[str]] = defaultdict(list)
        for name, start_dates in self.visible().order_by(Tour.id).with_entities(
            Tour.name, Tour.start_dates
        ):
            for raw in start_dates or []:
                start = date.fromisoformat(raw)
                if start.year == year:
                    starts[start.month].append(name)

        plan = [
            {"month": month, "num_tour_starts": len(names), "tours": names}
            for month, names in starts.items()
        ]
        plan.sort(key=lambda p: (-p["num_tour_starts"], p["month"]))
        return plan[:12]

    def within(self, distance: float, latlng: str, unit: str) -> list[Tour]:
        """Tours whose start location lies within ``distance`` of ``latlng``."""
        lat, lng = parse_latlng(latlng)
        if unit not in EARTH_RADIUS:
            raise BadRequestError("Unit must be either 'mi' or 'km'.")
        if distance < 0:
            raise BadRequestError("Distance must not be negative.")
        radius = distance / EARTH_RADIUS[unit]  # radians

        candidates = self.visible().filter(
            Tour.start_latitude.is_not(None), Tour.start_longitude.is_not(None)
        )
        return [
            tour
            for tour in candidates.order_by(Tour.id)
            if angular_distance(lat, lng, tour.start_latitude, tour.start_longitude) <= radius
        ]


def parse_latlng(latlng: str) -> tuple[float, float]:
    """Parse ``"lat,lng"``."""
    try:
        lat_raw, lng_raw = latlng.split(",")
        lat, lng = float(lat_raw), float(lng_raw)
    except ValueError as e:
        raise BadRequestError(LATLNG_FORMAT_MESSAGE) from e
    if not -90 <= lat <= 90 or not -180 <= lng <= 180:
        raise BadRequestError(LATLNG_FORMAT_MESSAGE)
    return lat, lng


def angular_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in radians (haversine)."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = phi2 - phi1
    d_lambda = math.radians(lng2 - lng1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * math.asin(min(1.0, math.sqrt(a)))
