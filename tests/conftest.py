"""
Shared fixtures.

Every test gets its own application bound to a fresh SQLite file in
``tmp_path``.  ``auth`` builds Authorization headers for an email and
``make_service`` lists a service as a given provider.
"""

import pytest
from fastapi.testclient import TestClient

from homehero_api.app.core.config import Settings
from homehero_api.app.core.db import Database
from homehero_api.app.core.security import create_access_token
from homehero_api.app.main import create_app


PROVIDER = "p@x.com"
CUSTOMER = "c@x.com"
OTHER = "o@x.com"


@pytest.fixture
def settings(tmp_path):
    return Settings(database_url=str(tmp_path / "homehero-test.db"), secret_key="test-secret")


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db(client, app) -> Database:
    """The initialised store client of the running test app."""
    return app.state.db


@pytest.fixture
def auth(settings):
    def _headers(email):
        token = create_access_token({"email": email}, settings=settings)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def make_service(client, auth):
    def _create(provider=PROVIDER, **overrides):
        body = {
            "serviceName": "Deep Home Cleaning",
            "category": "Cleaning",
            "price": 30,
            "description": "Kitchen and bathroom, three hours",
        }
        body.update(overrides)
        response = client.post("/services", json=body, headers=auth(provider))
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
def book(client, auth):
    def _book(service_id, customer=CUSTOMER, **extra):
        body = {"serviceId": service_id, "userEmail": customer}
        body.update(extra)
        return client.post("/bookings", json=body, headers=auth(customer))

    return _book
