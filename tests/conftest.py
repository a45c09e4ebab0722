"""Pytest configuration and fixtures."""

import os
import smtplib
from unittest.mock import patch

# Settings are cached on first import, so the test environment goes in first
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ["ENVIRONMENT"] = "test"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from src.api.dependencies import get_email_service  # noqa: E402
from src.database import Base, get_db  # noqa: E402
from src.main import app  # noqa: E402
from src.models.enums import Difficulty, Role  # noqa: E402
from src.models.tour import Tour  # noqa: E402
from src.services.auth import create_user  # noqa: E402
from src.services.tokens import get_token_codec  # noqa: E402


class AuthHeaders(dict):
    """Dict subclass that also stores user_id and email."""

    def __init__(self, *args, user_id: int | None = None, email: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


class FakeEmailService:
    """Records outgoing reset emails instead of sending them."""

    def __init__(self):
        self.sent: list[tuple[str, str]] = []
        self.fail = False

    async def send_password_reset(self, user, url: str) -> None:
        if self.fail:
            raise smtplib.SMTPException("mail server unavailable")
        self.sent.append((user.email, url))

    @property
    def last_token(self) -> str:
        return self.sent[-1][1].rsplit("/", 1)[-1]


SQLALCHEMY_DATABASE_URL = os.environ["DATABASE_URL"]

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture(autouse=True)
def welcome_email_task():
    """Keep signup from reaching the Celery broker."""
    with patch("src.api.auth.send_welcome_email.delay") as mock_task:
        yield mock_task


@pytest.fixture
def email_service():
    """Fake email service injected into the app."""
    return FakeEmailService()


@pytest.fixture(scope="function")
def client(db, email_service):
    """Create a test client with database and email overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_service] = lambda: email_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(client):
    """Sign up a regular user and return auth headers with user info."""
    response = client.post(
        "/api/v1/users/signup",
        json={
            "name": "Test User",
            "email": "test@example.com",
            "password": "testpass123",
            "password_confirm": "testpass123",
        },
    )
    assert response.status_code == 201
    data = response.json()
    # Tests authenticate through headers unless they opt into the cookie
    client.cookies.clear()

    return AuthHeaders(
        {"Authorization": f"Bearer {data['token']}"},
        user_id=data["user"]["id"],
        email=data["user"]["email"],
    )


@pytest.fixture
def make_user(db):
    """Factory creating users directly in the store."""

    def _make_user(
        email: str = "user@example.com",
        password: str = "password123",
        name: str = "Jane Doe",
        role: Role = Role.USER,
    ):
        user = create_user(db, name, email, password)
        if role != Role.USER:
            user.role = role
            db.commit()
            db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def headers_for():
    """Build bearer headers for a user, optionally with a backdated token."""

    def _headers_for(user, issued_at=None) -> AuthHeaders:
        token = get_token_codec().issue(user.id, issued_at=issued_at)
        return AuthHeaders(
            {"Authorization": f"Bearer {token}"}, user_id=user.id, email=user.email
        )

    return _headers_for


@pytest.fixture
def admin_headers(make_user, headers_for):
    return headers_for(make_user(email="admin@example.com", name="Ada Admin", role=Role.ADMIN))


@pytest.fixture
def make_tour(db):
    """Factory creating tours directly in the store."""

    def _make_tour(name: str = "The Forest Hiker", **overrides):
        tour = Tour(
            duration=overrides.pop("duration", 5),
            max_group_size=overrides.pop("max_group_size", 25),
            difficulty=overrides.pop("difficulty", Difficulty.EASY),
            price=overrides.pop("price", 397),
            summary=overrides.pop("summary", "Breathtaking hike through the Canadian Banff"),
            image_cover=overrides.pop("image_cover", "tour-1-cover.jpg"),
            **overrides,
        )
        tour.set_name(name)
        db.add(tour)
        db.commit()
        db.refresh(tour)
        return tour

    return _make_tour
