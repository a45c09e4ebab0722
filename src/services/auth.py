"""Authentication service: password hashing, credential store access and reset flow."""

import hashlib
import logging
import secrets
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from fastapi.concurrency import run_in_threadpool
from passlib.context import CryptContext
from sqlalchemy.orm import Query, Session

from src.config import get_settings
from src.database import commit
from src.errors import (
    DeliveryError,
    InvalidOrExpiredTokenError,
    UserNotFoundError,
    WrongPasswordError,
)
from src.models.user import User
from src.services.email import EmailService

logger = logging.getLogger(__name__)
settings = get_settings()

# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def _password_fields(new_password: str) -> dict:
    return {
        "password": get_password_hash(new_password),
        "password_changed_at": datetime.now(UTC),
    }


# Credential store access. Every read goes through active_users().


def active_users(db: Session) -> Query:
    """Query over users that have not been deactivated."""
    return db.query(User).filter(User.active.is_(True))


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get an active user by email."""
    return active_users(db).filter(User.email == email.lower()).first()


def get_user_by_id(db: Session, user_id: int) -> User | None:
    """Get an active user by id."""
    return active_users(db).filter(User.id == user_id).first()


def create_user(db: Session, name: str, email: str, password: str) -> User:
    """Create a new user. The password is always hashed before it is stored.

    Raises:
        DuplicateKeyError: the email is already taken (active or not).
    """
    user = User(name=name, email=email.lower(), password=get_password_hash(password))
    db.add(user)
    commit(db, user)
    db.refresh(user)
    return user


def authenticate_user(db: Session, email: str, password: str) -> User | None:
    """Authenticate a user by email and password."""
    user = get_user_by_email(db, email)
    if not user:
        return None
    if not verify_password(password, user.password):
        return None
    return user


def change_password(user: User, new_password: str) -> None:
    """Hash and set a new password on an existing user, stamping password_changed_at."""
    for field, value in _password_fields(new_password).items():
        setattr(user, field, value)


def update_password(db: Session, user: User, current_password: str, new_password: str) -> User:
    """Change a logged-in user's password after checking the current one.

    Raises:
        WrongPasswordError: ``current_password`` does not match; nothing is written.
    """
    if not verify_password(current_password, user.password):
        raise WrongPasswordError()

    change_password(user, new_password)
    commit(db, user)
    db.refresh(user)
    return user


# Password reset


def hash_reset_token(raw_token: str) -> str:
    """One-way hash under which a reset token is stored."""
    return hashlib.sha256(raw_token.encode()).hexdigest()


def create_password_reset_token(user: User) -> str:
    """Generate a reset token, store its hash and expiry on ``user``, return the raw token."""
    raw_token = secrets.token_hex(32)
    user.password_reset_token = hash_reset_token(raw_token)
    user.password_reset_expires = datetime.now(UTC) + timedelta(
        minutes=settings.password_reset_expiration_minutes
    )
    return raw_token


def issue_password_reset(db: Session, email: str) -> tuple[User, str]:
    """Store a fresh reset token for ``email`` and return the user with the raw token.

    Raises:
        UserNotFoundError: no active user has this email.
    """
    user = get_user_by_email(db, email)
    if user is None:
        raise UserNotFoundError()

    raw_token = create_password_reset_token(user)
    commit(db, user)
    db.refresh(user)
    return user, raw_token


def cancel_password_reset(db: Session, user: User) -> None:
    """Drop a pending reset token."""
    user.clear_password_reset()
    commit(db, user)


async def request_password_reset(
    db: Session,
    email: str,
    email_service: EmailService,
    reset_url: Callable[[str], str],
) -> None:
    """Store a reset token for ``email`` and mail the raw token to the user.

    Store access runs in the threadpool; only the send is awaited on the loop.

    Raises:
        UserNotFoundError: no active user has this email.
        DeliveryError: the email could not be sent; the stored token was cleared.
    """
    user, raw_token = await run_in_threadpool(issue_password_reset, db, email)

    try:
        await email_service.send_password_reset(user, reset_url(raw_token))
    except Exception as e:
        logger.error(f"Failed to send password reset email to user {user.id}: {e}")
        await run_in_threadpool(cancel_password_reset, db, user)
        raise DeliveryError() from e


def reset_password(db: Session, raw_token: str, new_password: str) -> User:
    """Redeem a reset token and set a new password.

    The write is conditioned on the stored hash and expiry, so a token can be
    redeemed at most once even under concurrent requests.

    Raises:
        InvalidOrExpiredTokenError: no active user holds this unexpired token.
    """
    hashed_token = hash_reset_token(raw_token)
    now = datetime.now(UTC)

    user = (
        active_users(db)
        .filter(User.password_reset_token == hashed_token, User.password_reset_expires > now)
        .first()
    )
    if user is None:
        raise InvalidOrExpiredTokenError()

    updated = (
        db.query(User)
        .filter(
            User.id == user.id,
            User.password_reset_token == hashed_token,
            User.password_reset_expires > now,
        )
        .update(
            {
                **_password_fields(new_password),
                "password_reset_token": None,
                "password_reset_expires": None,
            },
            synchronize_session=False,
        )
    )
    if updated != 1:
        db.rollback()
        raise InvalidOrExpiredTokenError()

    commit(db, user)
    db.refresh(user)
    return user
