"""
Tests for catalog listing, filtering and provider-side management.
"""

from .conftest import CUSTOMER, OTHER, PROVIDER


def _names(services):
    return [service["serviceName"] for service in services]


def test_create_service_defaults(make_service):
    """New services start at 4.5 with no reviews, whatever the client sends."""
    service = make_service(averageRating=1, reviews=[{"rating": 1}])

    assert service["averageRating"] == 4.5
    assert service["reviews"] == []
    assert service["providerEmail"] == PROVIDER
    assert service["_id"]
    assert service["createdAt"]
    assert service["updatedAt"] is None


def test_create_service_for_someone_else_is_forbidden(client, auth):
    response = client.post(
        "/services",
        json={"serviceName": "Painting", "category": "Repair", "price": 40, "providerEmail": OTHER},
        headers=auth(PROVIDER),
    )
    assert response.status_code == 403


def test_create_service_requires_token(client):
    response = client.post("/services", json={"serviceName": "Painting", "category": "Repair", "price": 40})
    assert response.status_code == 401


def test_negative_price_is_rejected(client, auth):
    response = client.post(
        "/services",
        json={"serviceName": "Painting", "category": "Repair", "price": -1},
        headers=auth(PROVIDER),
    )
    assert response.status_code == 422
    assert response.json()["error"] is True


def test_get_service(client, make_service):
    created = make_service()
    response = client.get(f"/services/{created['_id']}")

    assert response.status_code == 200
    assert response.json()["serviceName"] == "Deep Home Cleaning"


def test_get_missing_service_is_404(client):
    response = client.get("/services/does-not-exist")
    assert response.status_code == 404
    assert response.json() == {"error": True, "message": "Service not found"}


def test_list_without_filters_returns_everything(client, make_service):
    make_service(serviceName="A")
    make_service(serviceName="B")

    response = client.get("/services")
    assert response.status_code == 200
    assert _names(response.json()) == ["A", "B"]


def test_price_range_is_inclusive(client, make_service):
    for name, price in [("cheap", 5), ("low", 10), ("mid", 30), ("high", 50), ("luxury", 80)]:
        make_service(serviceName=name, price=price)

    response = client.get("/services", params={"minPrice": 10, "maxPrice": 50})
    prices = [service["price"] for service in response.json()]

    assert _names(response.json()) == ["low", "mid", "high"]
    assert all(10 <= price <= 50 for price in prices)


def test_single_price_bound(client, make_service):
    make_service(serviceName="low", price=10)
    make_service(serviceName="high", price=90)

    assert _names(client.get("/services", params={"minPrice": 50}).json()) == ["high"]
    assert _names(client.get("/services", params={"maxPrice": 50}).json()) == ["low"]


def test_category_filter_and_all(client, make_service):
    make_service(serviceName="Sparkle", category="Cleaning")
    make_service(serviceName="Fix-it", category="Plumbing")

    assert _names(client.get("/services", params={"category": "Plumbing"}).json()) == ["Fix-it"]
    assert _names(client.get("/services", params={"category": "all"}).json()) == ["Sparkle", "Fix-it"]


def test_search_is_case_insensitive_across_fields(client, make_service):
    make_service(serviceName="Window Wash", category="Cleaning", description="Streak free")
    make_service(serviceName="Pipe Repair", category="PLUMBING", description="Leaks fixed")
    make_service(serviceName="Garden", category="Outdoor", description="Lawn and WINDOW boxes")

    assert _names(client.get("/services", params={"search": "window"}).json()) == ["Window Wash", "Garden"]
    assert _names(client.get("/services", params={"search": "plumb"}).json()) == ["Pipe Repair"]


def test_search_treats_wildcards_literally(client, make_service):
    make_service(serviceName="100% satisfaction")
    make_service(serviceName="Plain")

    assert _names(client.get("/services", params={"search": "%"}).json()) == ["100% satisfaction"]


def test_search_folds_non_ascii_case(client, make_service):
    make_service(serviceName="Élagage des arbres", category="Jardinage")
    make_service(serviceName="Tonte")

    assert _names(client.get("/services", params={"search": "élagage"}).json()) == ["Élagage des arbres"]
    assert _names(client.get("/services", params={"search": "JARDINAGE"}).json()) == ["Élagage des arbres"]


def test_sort_and_limit(client, make_service):
    make_service(serviceName="mid", price=30)
    make_service(serviceName="high", price=50)
    make_service(serviceName="low", price=10)

    assert _names(client.get("/services", params={"sortBy": "price-asc"}).json()) == ["low", "mid", "high"]
    assert _names(client.get("/services", params={"sortBy": "price-desc"}).json()) == ["high", "mid", "low"]
    limited = client.get("/services", params={"sortBy": "price-asc", "limit": 2}).json()
    assert _names(limited) == ["low", "mid"]


def test_sort_by_rating(client, make_service, book, auth):
    first = make_service(serviceName="first")
    second = make_service(serviceName="second")
    book(first["_id"])
    client.post(f"/services/{first['_id']}/review", json={"rating": 2}, headers=auth(CUSTOMER))

    assert _names(client.get("/services", params={"sortBy": "rating-desc"}).json()) == ["second", "first"]
    # legacy spelling
    assert _names(client.get("/services", params={"sortBy": "rating"}).json()) == ["second", "first"]
    assert second["averageRating"] == 4.5


def test_my_services(client, make_service, auth):
    make_service(serviceName="mine")
    make_service(provider=OTHER, serviceName="theirs")

    response = client.get("/my-services", params={"email": PROVIDER}, headers=auth(PROVIDER))
    assert response.status_code == 200
    assert _names(response.json()) == ["mine"]


def test_owner_can_patch(client, make_service, auth):
    service = make_service()
    response = client.patch(
        f"/services/{service['_id']}",
        params={"email": PROVIDER},
        json={"price": 45, "_id": "hijacked", "averageRating": 1},
        headers=auth(PROVIDER),
    )

    assert response.status_code == 200
    updated = response.json()
    assert updated["_id"] == service["_id"]
    assert updated["price"] == 45
    assert updated["serviceName"] == service["serviceName"]
    assert updated["averageRating"] == 4.5
    assert updated["updatedAt"] is not None


def test_non_owner_cannot_patch(client, make_service, auth):
    service = make_service()
    response = client.patch(
        f"/services/{service['_id']}",
        params={"email": OTHER},
        json={"price": 1},
        headers=auth(OTHER),
    )
    assert response.status_code == 403
    assert client.get(f"/services/{service['_id']}").json()["price"] == 30


def test_patch_missing_service_is_403(client, auth):
    response = client.patch(
        "/services/unknown", params={"email": PROVIDER}, json={"price": 1}, headers=auth(PROVIDER)
    )
    assert response.status_code == 403


def test_delete_cascades_to_bookings(client, make_service, book, auth, db):
    """Deleting a service leaves no booking referencing it."""
    service = make_service()
    keep = make_service(serviceName="keep")
    assert book(service["_id"]).status_code == 201
    assert book(service["_id"], customer=OTHER).status_code == 201
    assert book(keep["_id"]).status_code == 201

    response = client.delete(f"/services/{service['_id']}", params={"email": PROVIDER}, headers=auth(PROVIDER))

    assert response.status_code == 200
    assert response.json()["deletedCount"] == 1
    assert response.json()["deletedBookings"] == 2
    assert client.get(f"/services/{service['_id']}").status_code == 404
    with db.transaction() as cursor:
        remaining = cursor.execute(
            "SELECT COUNT(*) AS n FROM bookings WHERE service_id = ?", (service["_id"],)
        ).fetchone()["n"]
        kept = cursor.execute("SELECT COUNT(*) AS n FROM bookings").fetchone()["n"]
    assert remaining == 0
    assert kept == 1


def test_non_owner_cannot_delete(client, make_service, auth):
    service = make_service()
    response = client.delete(f"/services/{service['_id']}", params={"email": OTHER}, headers=auth(OTHER))
    assert response.status_code == 403
    assert client.get(f"/services/{service['_id']}").status_code == 200


def test_top_rated_caps_at_six_and_skips_low_ratings(client, make_service, book, auth):
    services = [make_service(serviceName=f"s{i}") for i in range(8)]
    low, best = services[0], services[7]
    book(low["_id"])
    client.post(f"/services/{low['_id']}/review", json={"rating": 1}, headers=auth(CUSTOMER))
    book(best["_id"])
    client.post(f"/services/{best['_id']}/review", json={"rating": 5}, headers=auth(CUSTOMER))

    top = client.get("/top-rated-services").json()

    assert len(top) == 6
    assert top[0]["serviceName"] == "s7"
    assert "s0" not in _names(top)
    assert all(service["averageRating"] >= 4 for service in top)
    ratings = [service["averageRating"] for service in top]
    assert ratings == sorted(ratings, reverse=True)


def test_categories_are_distinct(client, make_service):
    make_service(category="Cleaning")
    make_service(category="Plumbing")
    make_service(category="Cleaning")

    assert client.get("/categories").json() == ["Cleaning", "Plumbing"]
