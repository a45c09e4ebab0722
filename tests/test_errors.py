"""Error normalizer tests."""

import json
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from starlette.requests import Request

from src.api.errors import GENERIC_MESSAGE, PAGE_TITLE, build_response
from src.config import Environment, get_settings
from src.database import commit, get_db
from src.errors import (
    AppError,
    BadRequestError,
    CastError,
    DuplicateKeyError,
    NotFoundError,
    ValidationError,
)
from src.main import app
from src.models.user import User


def make_request(path: str = "/api/v1/tours") -> Request:
    scope = {"type": "http", "method": "GET", "path": path, "headers": [], "query_string": b""}
    return Request(scope)


def render(exc: Exception, path: str = "/api/v1/tours") -> tuple[int, dict]:
    response = build_response(make_request(path), exc)
    return response.status_code, json.loads(response.body)


@pytest.fixture
def production():
    settings = get_settings().model_copy(update={"environment": Environment.PRODUCTION})
    with patch("src.api.errors.get_settings", return_value=settings):
        yield settings


def test_operational_error_in_production(production):
    status_code, body = render(NotFoundError())
    assert status_code == 404
    assert body == {"status": "fail", "message": "No document found with that ID"}


def test_unknown_error_in_production(production):
    status_code, body = render(RuntimeError("database password is hunter2"))
    assert status_code == 500
    assert body == {"status": "error", "message": GENERIC_MESSAGE}


def test_development_shape_includes_details():
    status_code, body = render(RuntimeError("kaboom"))
    assert status_code == 500
    assert body["status"] == "error"
    assert body["message"] == GENERIC_MESSAGE
    assert body["error"] == {"type": "RuntimeError", "detail": "kaboom"}
    assert "RuntimeError" in body["stack"]


def test_cast_error_translation(production):
    status_code, body = render(CastError("id", "abc"))
    assert status_code == 400
    assert body == {"status": "fail", "message": "Invalid id: abc."}


def test_duplicate_key_translation(production):
    status_code, body = render(DuplicateKeyError("name", "The Forest Hiker"))
    assert status_code == 400
    assert body["message"] == "Duplicate field value: The Forest Hiker. Please use another value"


def test_validation_translation(production):
    status_code, body = render(ValidationError(["Rating is required", "Review is empty"]))
    assert status_code == 400
    assert body["message"] == "Invalid input data. Rating is required. Review is empty"


def test_page_shape_outside_api():
    status_code, body = render(BadRequestError("Nope"), path="/tour/unknown")
    assert status_code == 400
    assert body == {"title": PAGE_TITLE, "msg": "Nope"}


def test_page_shape_hides_unknown_errors():
    status_code, body = render(RuntimeError("secret detail"), path="/")
    assert status_code == 500
    assert body == {"title": PAGE_TITLE, "msg": GENERIC_MESSAGE}


def test_unknown_route(client):
    response = client.get("/api/v1/nothing-here")
    assert response.status_code == 404
    assert response.json()["message"] == "Can't find /api/v1/nothing-here on this server!"


def test_path_cast_error(client):
    response = client.get("/api/v1/tours/abc")
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid tour_id: abc."


def test_unhandled_exception_becomes_generic_500(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        with TestClient(app, raise_server_exceptions=False) as client:
            with patch(
                "src.services.tour_service.TourService.stats",
                side_effect=RuntimeError("boom"),
            ):
                response = client.get("/api/v1/tours/tour-stats")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json()["status"] == "error"
    assert response.json()["message"] == GENERIC_MESSAGE


def test_commit_translates_unique_violation(db, make_user):
    make_user(email="taken@example.com")
    duplicate = User(name="Copy", email="taken@example.com", password="x")
    db.add(duplicate)
    with pytest.raises(DuplicateKeyError) as exc_info:
        commit(db, duplicate)
    assert exc_info.value.field == "email"
    assert exc_info.value.value == "taken@example.com"

    # Session is usable again after the failed write
    assert db.query(User).count() == 1


def test_non_operational_app_error_is_hidden(production):
    class InternalFault(AppError):
        is_operational = False

    status_code, body = render(InternalFault("internal state corrupted"))
    assert status_code == 500
    assert body == {"status": "error", "message": GENERIC_MESSAGE}
