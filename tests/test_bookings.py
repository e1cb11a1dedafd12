"""
Tests for the booking rules: no self-booking, one active booking per
customer and service, owner-only cancellation.
"""

import sqlite3

import pytest

from homehero_api.app.services import booking_service

from .conftest import CUSTOMER, OTHER, PROVIDER


def test_booking_lifecycle_example(client, make_service, book, auth):
    """Book, re-book, self-book, review, re-review."""
    service = make_service(price=30)

    first = book(service["_id"])
    assert first.status_code == 201
    assert first.json()["status"] == "pending"
    assert first.json()["userEmail"] == CUSTOMER
    assert first.json()["serviceId"] == service["_id"]

    again = book(service["_id"])
    assert again.status_code == 400
    assert again.json() == {"error": True, "message": "You have already booked this service"}

    own = book(service["_id"], customer=PROVIDER)
    assert own.status_code == 400
    assert own.json()["message"] == "You cannot book your own service"

    review = client.post(f"/services/{service['_id']}/review", json={"rating": 5}, headers=auth(CUSTOMER))
    assert review.status_code == 200
    assert client.get(f"/services/{service['_id']}").json()["averageRating"] == 5

    second_review = client.post(
        f"/services/{service['_id']}/review", json={"rating": 4}, headers=auth(CUSTOMER)
    )
    assert second_review.status_code == 400
    assert second_review.json()["message"] == "You have already reviewed this service"


def test_booking_unknown_service_is_404(book):
    response = book("no-such-service")
    assert response.status_code == 404
    assert response.json()["message"] == "Service not found"


def test_booking_for_someone_else_is_forbidden(client, make_service, auth):
    service = make_service()
    response = client.post(
        "/bookings", json={"serviceId": service["_id"], "userEmail": OTHER}, headers=auth(CUSTOMER)
    )
    assert response.status_code == 403


def test_user_email_defaults_to_caller(client, make_service, auth):
    service = make_service()
    response = client.post("/bookings", json={"serviceId": service["_id"]}, headers=auth(CUSTOMER))
    assert response.status_code == 201
    assert response.json()["userEmail"] == CUSTOMER


def test_booking_keeps_optional_details(make_service, book):
    service = make_service()
    response = book(service["_id"], userName="Casey", bookingDate="2026-11-02", address="12 Elm St", notes="Dog")
    body = response.json()

    assert body["userName"] == "Casey"
    assert body["bookingDate"] == "2026-11-02"
    assert body["address"] == "12 Elm St"
    assert body["notes"] == "Dog"


def test_list_bookings_joins_service(client, make_service, book, auth):
    a = make_service(serviceName="A")
    b = make_service(serviceName="B", provider=OTHER)
    book(a["_id"])
    book(b["_id"])
    book(a["_id"], customer=OTHER)

    response = client.get("/bookings", params={"email": CUSTOMER}, headers=auth(CUSTOMER))
    bookings = response.json()

    assert response.status_code == 200
    assert [booking["serviceId"] for booking in bookings] == [a["_id"], b["_id"]]
    assert [booking["service"]["serviceName"] for booking in bookings] == ["A", "B"]
    assert all(booking["userEmail"] == CUSTOMER for booking in bookings)


def test_list_bookings_of_someone_else_is_forbidden(client, auth):
    response = client.get("/bookings", params={"email": CUSTOMER}, headers=auth(OTHER))
    assert response.status_code == 403


def test_cancel_own_booking(client, make_service, book, auth):
    service = make_service()
    booking = book(service["_id"]).json()

    response = client.delete(f"/bookings/{booking['_id']}", params={"email": CUSTOMER}, headers=auth(CUSTOMER))

    assert response.status_code == 200
    assert response.json()["deletedCount"] == 1
    assert client.get("/bookings", params={"email": CUSTOMER}, headers=auth(CUSTOMER)).json() == []


def test_cancel_then_book_again(client, make_service, book, auth):
    service = make_service()
    booking = book(service["_id"]).json()
    client.delete(f"/bookings/{booking['_id']}", params={"email": CUSTOMER}, headers=auth(CUSTOMER))

    assert book(service["_id"]).status_code == 201


def test_cannot_cancel_someone_elses_booking(client, make_service, book, auth):
    service = make_service()
    booking = book(service["_id"]).json()

    response = client.delete(f"/bookings/{booking['_id']}", params={"email": OTHER}, headers=auth(OTHER))

    assert response.status_code == 403
    assert len(client.get("/bookings", params={"email": CUSTOMER}, headers=auth(CUSTOMER)).json()) == 1


def test_cancel_unknown_booking_is_403(client, auth):
    response = client.delete("/bookings/unknown", params={"email": CUSTOMER}, headers=auth(CUSTOMER))
    assert response.status_code == 403


def test_cancelled_booking_does_not_block_a_new_one(client, make_service, book, auth, db):
    """Only non-cancelled bookings count towards the duplicate rule."""
    service = make_service()
    booking = book(service["_id"]).json()
    with db.transaction() as cursor:
        cursor.execute("UPDATE bookings SET status = 'cancelled' WHERE id = ?", (booking["_id"],))

    assert book(service["_id"]).status_code == 201


def test_store_rejects_second_active_booking(make_service, book, db):
    """The unique index holds even if the application check is bypassed."""
    service = make_service()
    book(service["_id"])

    with pytest.raises(sqlite3.IntegrityError):
        with db.transaction() as cursor:
            cursor.execute(
                "INSERT INTO bookings (id, service_id, user_email, status, created_at) "
                "VALUES ('dup', ?, ?, 'completed', '2026-01-01T00:00:00+00:00')",
                (service["_id"], CUSTOMER),
            )


def test_racing_duplicate_booking_is_400(make_service, book, monkeypatch):
    """A duplicate that slips past the lookup is still reported as a 400."""
    service = make_service()
    assert book(service["_id"]).status_code == 201

    monkeypatch.setattr(booking_service, "find_active_booking", lambda *args: None)
    response = book(service["_id"])

    assert response.status_code == 400
    assert response.json() == {"error": True, "message": "You have already booked this service"}
