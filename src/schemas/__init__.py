"""Pydantic schemas for API requests and responses."""

from src.schemas.auth import (
    AuthResponse,
    ForgotPassword,
    MessageResponse,
    ResetPassword,
    UpdatePassword,
    UserLogin,
    UserResponse,
    UserSignup,
)
from src.schemas.booking import BookingCreate, BookingResponse, BookingUpdate
from src.schemas.review import ReviewCreate, ReviewResponse, ReviewUpdate
from src.schemas.tour import TourCreate, TourDetailResponse, TourResponse, TourUpdate
from src.schemas.user import UserAdminUpdate, UserUpdateMe

__all__ = [
    "UserSignup",
    "UserLogin",
    "ForgotPassword",
    "ResetPassword",
    "UpdatePassword",
    "UserResponse",
    "AuthResponse",
    "MessageResponse",
    "UserUpdateMe",
    "UserAdminUpdate",
    "TourCreate",
    "TourUpdate",
    "TourResponse",
    "TourDetailResponse",
    "ReviewCreate",
    "ReviewUpdate",
    "ReviewResponse",
    "BookingCreate",
    "BookingUpdate",
    "BookingResponse",
]
