"""
Application package initializer.

The project is split by concern: ``core`` holds configuration, logging,
errors, security and the store client; ``schemas`` the pydantic models;
``services`` the business rules for the catalog, bookings and reviews;
and ``api`` the FastAPI routers that expose them.
"""

from .main import app, create_app  # noqa: F401
