"""Review service with tour rating maintenance."""

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from src.database import commit
from src.errors import ForbiddenError, NotFoundError
from src.models.enums import Role
from src.models.review import Review
from src.models.tour import Tour
from src.models.user import User
from src.schemas.review import ReviewCreate, ReviewUpdate

logger = logging.getLogger(__name__)

DEFAULT_RATING = 4.5


class ReviewService:
    """Service for reviews. Every write recalculates the reviewed tour's ratings."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def list_reviews(self, tour_id: int | None = None) -> list[Review]:
        query = self.db.query(Review)
        if tour_id is not None:
            query = query.filter(Review.tour_id == tour_id)
        return query.order_by(Review.created_at.desc(), Review.id.desc()).all()

    def get(self, review_id: int) -> Review:
        review = self.db.query(Review).filter(Review.id == review_id).first()
        if review is None:
            raise NotFoundError()
        return review

    def create(self, author: User, data: ReviewCreate, tour_id: int | None = None) -> Review:
        """Create a review by ``author``. A tour id from the URL wins over the body.

        Raises:
            NotFoundError: the tour does not exist.
            DuplicateKeyError: the author already reviewed this tour.
        """
        tour_id = tour_id if tour_id is not None else data.tour_id
        tour = (
            self.db.query(Tour)
            .filter(Tour.id == tour_id, Tour.secret_tour.is_(False))
            .first()
            if tour_id is not None
            else None
        )
        if tour is None:
            raise NotFoundError("No tour found with that ID")

        review = Review(review=data.review, rating=data.rating, tour_id=tour.id, user_id=author.id)
        self.db.add(review)
        commit(self.db, review)
        self.recalculate_ratings(tour.id)
        self.db.refresh(review)
        return review

    def update(self, review: Review, actor: User, data: ReviewUpdate) -> Review:
        self._check_owner(review, actor)
        if data.review is not None:
            review.review = data.review
        if data.rating is not None:
            review.rating = data.rating
        commit(self.db, review)
        self.recalculate_ratings(review.tour_id)
        self.db.refresh(review)
        return review

    def delete(self, review: Review, actor: User) -> None:
        self._check_owner(review, actor)
        tour_id = review.tour_id
        self.db.delete(review)
        commit(self.db)
        self.recalculate_ratings(tour_id)

    def recalculate_ratings(self, tour_id: int) -> None:
        """Store the average rating (one decimal) and review count on the tour."""
        count, average = (
            self.db.query(func.count(Review.id), func.avg(Review.rating))
            .filter(Review.tour_id == tour_id)
            .one()
        )
        tour = self.db.query(Tour).filter(Tour.id == tour_id).first()
        if tour is None:
            return
        tour.ratings_quantity = count
        tour.ratings_average = round(average, 1) if count else DEFAULT_RATING
        commit(self.db, tour)
        logger.debug(f"Tour {tour_id} ratings: {tour.ratings_average} from {count} reviews")

    @staticmethod
    def _check_owner(review: Review, actor: User) -> None:
        # Admins may moderate any review
        if actor.role != Role.ADMIN and review.user_id != actor.id:
            raise ForbiddenError("You can only modify your own reviews")
