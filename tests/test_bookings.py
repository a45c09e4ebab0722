"""Booking endpoint tests."""

from src.models.enums import Role


def test_create_booking_defaults_to_tour_price(client, admin_headers, auth_headers, make_tour):
    tour = make_tour(price=497)
    response = client.post(
        "/api/v1/bookings",
        headers=admin_headers,
        json={"tour_id": tour.id, "user_id": auth_headers.user_id},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["price"] == 497
    assert data["paid"] is True


def test_booking_for_unknown_user(client, admin_headers, make_tour):
    tour = make_tour()
    response = client.post(
        "/api/v1/bookings", headers=admin_headers, json={"tour_id": tour.id, "user_id": 999}
    )
    assert response.status_code == 404
    assert response.json()["message"] == "No user found with that ID"


def test_booking_crud(client, admin_headers, auth_headers, make_tour):
    tour = make_tour()
    booking_id = client.post(
        "/api/v1/bookings",
        headers=admin_headers,
        json={"tour_id": tour.id, "user_id": auth_headers.user_id, "price": 300, "paid": False},
    ).json()["id"]

    response = client.get(
        "/api/v1/bookings", headers=admin_headers, params={"user_id": auth_headers.user_id}
    )
    assert [b["id"] for b in response.json()] == [booking_id]

    response = client.patch(
        f"/api/v1/bookings/{booking_id}", headers=admin_headers, json={"paid": True}
    )
    assert response.json()["paid"] is True
    assert response.json()["price"] == 300

    assert client.delete(f"/api/v1/bookings/{booking_id}", headers=admin_headers).status_code == 204
    assert client.get(f"/api/v1/bookings/{booking_id}", headers=admin_headers).status_code == 404


def test_bookings_restricted(client, auth_headers, make_user, headers_for):
    assert client.get("/api/v1/bookings", headers=auth_headers).status_code == 403

    lead = make_user(email="lead@example.com", role=Role.LEAD_GUIDE)
    assert client.get("/api/v1/bookings", headers=headers_for(lead)).status_code == 200
