"""Review endpoint tests."""

import pytest

from src.models.enums import Role


@pytest.fixture
def tour(make_tour):
    return make_tour()


def post_review(client, headers, tour_id, rating=5, text="Amazing!"):
    return client.post(
        f"/api/v1/tours/{tour_id}/reviews",
        headers=headers,
        json={"review": text, "rating": rating},
    )


def test_create_review_updates_ratings(client, db, auth_headers, make_user, headers_for, tour):
    response = post_review(client, auth_headers, tour.id, rating=5)
    assert response.status_code == 201
    data = response.json()
    assert data["tour_id"] == tour.id
    assert data["user_id"] == auth_headers.user_id
    assert data["user"]["name"] == "Test User"

    other = make_user(email="other@example.com")
    assert post_review(client, headers_for(other), tour.id, rating=2).status_code == 201

    db.refresh(tour)
    assert tour.ratings_quantity == 2
    assert tour.ratings_average == 3.5


def test_create_review_with_body_tour_id(client, auth_headers, tour):
    response = client.post(
        "/api/v1/reviews",
        headers=auth_headers,
        json={"review": "Loved it", "rating": 4, "tour_id": tour.id},
    )
    assert response.status_code == 201
    assert response.json()["tour_id"] == tour.id


def test_one_review_per_tour(client, auth_headers, tour):
    assert post_review(client, auth_headers, tour.id).status_code == 201
    response = post_review(client, auth_headers, tour.id)
    assert response.status_code == 400
    assert response.json()["message"].startswith("Duplicate field value")


def test_review_missing_tour(client, auth_headers):
    response = post_review(client, auth_headers, 999)
    assert response.status_code == 404
    assert response.json()["message"] == "No tour found with that ID"


def test_rating_range(client, auth_headers, tour):
    response = post_review(client, auth_headers, tour.id, rating=6)
    assert response.status_code == 400
    assert response.json()["message"].startswith("Invalid input data. rating")


def test_guides_cannot_review(client, make_user, headers_for, tour):
    guide = make_user(email="guide@example.com", role=Role.GUIDE)
    assert post_review(client, headers_for(guide), tour.id).status_code == 403


def test_reviews_require_login(client, tour):
    assert client.get(f"/api/v1/tours/{tour.id}/reviews").status_code == 401


def test_list_tour_reviews(client, auth_headers, make_tour, tour):
    other_tour = make_tour("The Sea Explorer")
    post_review(client, auth_headers, tour.id)
    post_review(client, auth_headers, other_tour.id)

    response = client.get(f"/api/v1/tours/{tour.id}/reviews", headers=auth_headers)
    assert response.status_code == 200
    assert [r["tour_id"] for r in response.json()] == [tour.id]

    response = client.get("/api/v1/reviews", headers=auth_headers)
    assert len(response.json()) == 2


def test_only_author_can_edit(client, db, auth_headers, make_user, headers_for, tour):
    review_id = post_review(client, auth_headers, tour.id, rating=5).json()["id"]
    stranger = make_user(email="stranger@example.com")

    response = client.patch(
        f"/api/v1/reviews/{review_id}", headers=headers_for(stranger), json={"rating": 1}
    )
    assert response.status_code == 403
    assert response.json()["message"] == "You can only modify your own reviews"

    response = client.patch(
        f"/api/v1/reviews/{review_id}", headers=auth_headers, json={"rating": 3}
    )
    assert response.status_code == 200
    assert response.json()["rating"] == 3

    db.refresh(tour)
    assert tour.ratings_average == 3


def test_admin_deletes_review(client, db, auth_headers, admin_headers, tour):
    review_id = post_review(client, auth_headers, tour.id, rating=1).json()["id"]

    response = client.delete(f"/api/v1/reviews/{review_id}", headers=admin_headers)
    assert response.status_code == 204

    db.refresh(tour)
    assert tour.ratings_quantity == 0
    assert tour.ratings_average == 4.5

    response = client.get(f"/api/v1/reviews/{review_id}", headers=auth_headers)
    assert response.status_code == 404


def test_deleting_reviewer_updates_tour_ratings(
    client, db, make_user, headers_for, admin_headers, tour
):
    keeper = make_user(email="keeper@example.com")
    leaver = make_user(email="leaver@example.com")
    assert post_review(client, headers_for(keeper), tour.id, rating=4).status_code == 201
    assert post_review(client, headers_for(leaver), tour.id, rating=2).status_code == 201

    response = client.delete(f"/api/v1/users/{leaver.id}", headers=admin_headers)
    assert response.status_code == 204

    db.refresh(tour)
    assert tour.ratings_quantity == 1
    assert tour.ratings_average == 4.0

    client.delete(f"/api/v1/users/{keeper.id}", headers=admin_headers)
    db.refresh(tour)
    assert tour.ratings_quantity == 0
    assert tour.ratings_average == 4.5
