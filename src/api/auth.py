"""Authentication API endpoints.

Handlers that hash or check passwords are plain ``def`` so FastAPI runs them
in its threadpool instead of on the event loop.
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status

from src.api.dependencies import TOKEN_COOKIE, CurrentUser, DbSession, get_email_service
from src.config import get_settings
from src.errors import BadRequestError, IncorrectCredentialsError
from src.models.user import User
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
from src.services.auth import (
    authenticate_user,
    create_user,
    request_password_reset,
    reset_password,
    update_password,
)
from src.services.email import EmailService
from src.services.tokens import TokenCodec, get_token_codec
from src.tasks.email import send_welcome_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/users", tags=["auth"])

Codec = Annotated[TokenCodec, Depends(get_token_codec)]


def send_token(response: Response, user: User, codec: TokenCodec) -> AuthResponse:
    """Issue a session token, set it as a cookie and build the response body."""
    settings = get_settings()
    token = codec.issue(user.id)
    response.set_cookie(
        TOKEN_COOKIE,
        token,
        expires=datetime.now(UTC) + timedelta(days=settings.jwt_cookie_expiration_days),
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    return AuthResponse(token=token, user=UserResponse.model_validate(user))


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def signup(user_data: UserSignup, response: Response, db: DbSession, codec: Codec):
    """Register a new user and log them in."""
    user = create_user(db, user_data.name, user_data.email, user_data.password)
    logger.info(f"New user {user.id} signed up")

    send_welcome_email.delay(user.id)

    return send_token(response, user, codec)


@router.post("/login", response_model=AuthResponse)
def login(credentials: UserLogin, response: Response, db: DbSession, codec: Codec):
    """Login with email and password."""
    if not credentials.email or not credentials.password:
        raise BadRequestError("Please provide email and password!")

    user = authenticate_user(db, credentials.email, credentials.password)
    if not user:
        # Same error for unknown email and wrong password
        raise IncorrectCredentialsError()

    return send_token(response, user, codec)


@router.get("/logout", response_model=MessageResponse)
async def logout(response: Response):
    """Replace the session cookie with a short-lived dummy value."""
    response.set_cookie(
        TOKEN_COOKIE,
        "loggedout",
        expires=datetime.now(UTC) + timedelta(seconds=10),
        httponly=True,
    )
    return MessageResponse()


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    payload: ForgotPassword,
    request: Request,
    db: DbSession,
    email_service: Annotated[EmailService, Depends(get_email_service)],
):
    """Email a password reset link to the user."""
    await request_password_reset(
        db,
        payload.email,
        email_service,
        reset_url=lambda token: str(request.url_for("redeem_password_reset", token=token)),
    )
    return MessageResponse(message="Token sent to email!")


@router.patch("/reset-password/{token}", response_model=AuthResponse)
def redeem_password_reset(
    token: str, payload: ResetPassword, response: Response, db: DbSession, codec: Codec
):
    """Set a new password using a reset token, then log the user in."""
    user = reset_password(db, token, payload.password)
    logger.info(f"User {user.id} reset their password")
    return send_token(response, user, codec)


@router.patch("/update-my-password", response_model=AuthResponse)
def update_my_password(
    payload: UpdatePassword,
    response: Response,
    current_user: CurrentUser,
    db: DbSession,
    codec: Codec,
):
    """Change the logged-in user's password and issue a fresh token."""
    user = update_password(db, current_user, payload.password_current, payload.password)
    logger.info(f"User {user.id} changed their password")
    return send_token(response, user, codec)
