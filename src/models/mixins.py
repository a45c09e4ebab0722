"""Mixins for SQLAlchemy models."""

from sqlalchemy import Boolean, Column, DateTime, func, true


class TimestampMixin:
    """Mixin to add created_at and updated_at timestamp columns."""

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class ActiveMixin:
    """Mixin to add an ``active`` soft-delete flag."""

    active = Column(Boolean, default=True, server_default=true(), nullable=False)

    def deactivate(self) -> None:
        """Soft delete the record."""
        self.active = False
