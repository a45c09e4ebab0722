"""User model."""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy import Enum as SQLAlchemyEnum

from src.database import Base
from src.models.enums import Role
from src.models.mixins import ActiveMixin, TimestampMixin


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes read back from SQLite."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class User(Base, TimestampMixin, ActiveMixin):
    """User model for authentication, roles and ownership of reviews/bookings."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    photo = Column(String(255), nullable=False, default="default.jpg")
    role = Column(
        SQLAlchemyEnum(Role, name="user_roles", values_callable=lambda e: [r.value for r in e]),
        nullable=False,
        default=Role.USER,
    )

    # bcrypt hash, never exposed through a response schema
    password = Column(String(255), nullable=False)
    password_changed_at = Column(DateTime(timezone=True), nullable=True)

    # sha256 hex of the token mailed to the user
    password_reset_token = Column(String(64), nullable=True, index=True)
    password_reset_expires = Column(DateTime(timezone=True), nullable=True)

    def changed_password_after(self, issued_at: float) -> bool:
        """Check whether the password changed after a token's ``iat`` (epoch seconds)."""
        if self.password_changed_at is None:
            return False
        return issued_at < as_utc(self.password_changed_at).timestamp()

    def clear_password_reset(self) -> None:
        """Drop any pending reset token."""
        self.password_reset_token = None
        self.password_reset_expires = None
