"""User account and user administration endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from src.api.dependencies import CurrentUser, DbSession, get_review_service, restrict_to
from src.database import commit
from src.errors import BadRequestError, NotFoundError
from src.models.enums import Role
from src.models.user import User
from src.schemas.auth import UserResponse
from src.schemas.user import UserAdminUpdate, UserUpdateMe
from src.services.auth import active_users, get_user_by_id
from src.services.review_service import ReviewService

router = APIRouter(prefix="/api/v1/users", tags=["users"])

AdminUser = Annotated[User, Depends(restrict_to(Role.ADMIN))]


def get_user_or_404(db: Session, user_id: int) -> User:
    user = get_user_by_id(db, user_id)
    if user is None:
        raise NotFoundError()
    return user


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: CurrentUser):
    """Get current user information."""
    return current_user


@router.patch("/update-me", response_model=UserResponse)
async def update_me(payload: UserUpdateMe, current_user: CurrentUser, db: DbSession):
    """Update the current user's name or email."""
    if payload.password is not None or payload.password_confirm is not None:
        raise BadRequestError(
            "This route is not for password updates. Please use /update-my-password."
        )

    if payload.name is not None:
        current_user.name = payload.name
    if payload.email is not None:
        current_user.email = payload.email

    commit(db, current_user)
    db.refresh(current_user)
    return current_user


@router.delete("/delete-me", status_code=status.HTTP_204_NO_CONTENT)
async def delete_me(current_user: CurrentUser, db: DbSession):
    """Deactivate the current user's account."""
    current_user.deactivate()
    commit(db, current_user)


@router.get("", response_model=list[UserResponse])
async def get_users(admin: AdminUser, db: DbSession):
    """List all active users (admin only)."""
    return active_users(db).order_by(User.id).all()


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, admin: AdminUser, db: DbSession):
    """Get a user (admin only)."""
    return get_user_or_404(db, user_id)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(user_id: int, payload: UserAdminUpdate, admin: AdminUser, db: DbSession):
    """Update a user's profile or role (admin only). Passwords are not changed here."""
    user = get_user_or_404(db, user_id)
    for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(user, field, value)
    commit(db, user)
    db.refresh(user)
    return user


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    admin: AdminUser,
    db: DbSession,
    reviews: Annotated[ReviewService, Depends(get_review_service)],
):
    """Delete a user (admin only). Their reviews go too, so affected tours are re-rated."""
    user = get_user_or_404(db, user_id)
    tour_ids = {review.tour_id for review in user.reviews}
    db.delete(user)
    commit(db)
    for tour_id in sorted(tour_ids):
        reviews.recalculate_ratings(tour_id)
