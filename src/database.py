"""Database configuration and session management."""

import re
from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from src.config import get_settings
from src.errors import DuplicateKeyError

settings = get_settings()

engine_kwargs: dict[str, Any] = {"pool_pre_ping": True}
if settings.database_url.startswith("sqlite"):
    engine_kwargs["connect_args"] = {"check_same_thread": False}
else:
    engine_kwargs.update(pool_size=5, max_overflow=10)

engine = create_engine(settings.database_url, **engine_kwargs)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base: Any = declarative_base()

# SQLite and PostgreSQL phrase unique violations differently
_UNIQUE_VIOLATION_PATTERNS = (
    re.compile(r"UNIQUE constraint failed: (?P<fields>[\w.,\s]+)"),
    re.compile(r"Key \((?P<fields>[^)]*)\)=\((?P<value>[^)]*)\) already exists"),
)


def get_db() -> Generator[Session, None, None]:
    """Dependency that provides a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def commit(db: Session, instance: Any = None) -> None:
    """Commit the session, turning unique-index violations into DuplicateKeyError.

    ``instance`` is the object being written; it is used to report the
    offending value when the driver message does not include it.
    """
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        duplicate = _duplicate_key_from(exc, instance)
        if duplicate is None:
            raise
        raise duplicate from exc


def _duplicate_key_from(exc: IntegrityError, instance: Any) -> DuplicateKeyError | None:
    message = str(exc.orig)
    for pattern in _UNIQUE_VIOLATION_PATTERNS:
        match = pattern.search(message)
        if not match:
            continue
        # "users.email" or "reviews.tour_id, reviews.user_id"
        field = match.group("fields").split(",")[0].strip().split(".")[-1]
        value = match.groupdict().get("value")
        if value is None and instance is not None:
            value = getattr(instance, field, None)
        return DuplicateKeyError(field, value)
    return None
