"""FastAPI dependencies for sessions, role checks, database and services.

Session resolution runs in FastAPI's threadpool (plain ``def`` dependencies),
so token verification never blocks the event loop.
"""

import logging
from collections.abc import Callable
from typing import Annotated

from fastapi import Cookie, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from src.database import get_db
from src.errors import (
    AppError,
    ForbiddenError,
    NotAuthenticatedError,
    StalePasswordError,
    UserGoneError,
)
from src.models.enums import Role
from src.models.user import User
from src.services.auth import get_user_by_id
from src.services.email import EmailService
from src.services.review_service import ReviewService
from src.services.tokens import TokenCodec, get_token_codec
from src.services.tour_service import TourService

logger = logging.getLogger(__name__)

TOKEN_COOKIE = "jwt"

security = HTTPBearer(auto_error=False)


def extract_token(
    credentials: HTTPAuthorizationCredentials | None, cookie_token: str | None
) -> str | None:
    """Bearer header first, then the session cookie."""
    if credentials and credentials.credentials:
        return credentials.credentials
    return cookie_token or None


def resolve_session(db: Session, codec: TokenCodec, token: str) -> User:
    """Turn a token into the live user it belongs to.

    Raises:
        InvalidTokenError, ExpiredTokenError: from the codec.
        UserGoneError: the user was deleted or deactivated after issuance.
        StalePasswordError: the password changed after the token was issued.
    """
    payload = codec.verify(token)

    user = get_user_by_id(db, payload.user_id)
    if user is None:
        raise UserGoneError()

    if user.changed_password_after(payload.issued_at):
        raise StalePasswordError()

    return user


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
    jwt: Annotated[str | None, Cookie()] = None,
) -> User:
    """Get the current authenticated user from the bearer header or cookie."""
    token = extract_token(credentials, jwt)
    if token is None:
        raise NotAuthenticatedError()
    return resolve_session(db, codec, token)


def get_optional_user(
    db: Annotated[Session, Depends(get_db)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
    jwt: Annotated[str | None, Cookie()] = None,
) -> User | None:
    """Soft session check for page endpoints: anonymous instead of an error."""
    if not jwt:
        return None
    try:
        return resolve_session(db, codec, jwt)
    except AppError as e:
        logger.debug(f"Ignoring invalid page session: {e.message}")
        return None


def restrict_to(*roles: Role | str) -> Callable[..., User]:
    """Dependency factory allowing only users whose role is listed.

    Must be used on routes that also resolve the session; it depends on
    ``get_current_user`` itself.
    """
    allowed = frozenset(Role(role) for role in roles)

    def guard(current_user: Annotated[User, Depends(get_current_user)]) -> User:
        if current_user.role not in allowed:
            logger.info(f"User {current_user.id} ({current_user.role.value}) denied")
            raise ForbiddenError()
        return current_user

    return guard


CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[User | None, Depends(get_optional_user)]
DbSession = Annotated[Session, Depends(get_db)]


def get_email_service() -> EmailService:
    """Get email service instance."""
    return EmailService()


def get_tour_service(db: DbSession) -> TourService:
    """Get tour service with dependencies."""
    return TourService(db)


def get_review_service(db: DbSession) -> ReviewService:
    """Get review service with dependencies."""
    return ReviewService(db)
