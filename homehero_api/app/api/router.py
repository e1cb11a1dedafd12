"""
Top-level router.

Aggregates the domain routers.  Paths are served at the root, where
the web client expects them (``/services``, ``/bookings``, ``/jwt``).
"""

from fastapi import APIRouter

from .endpoints import auth, bookings, reviews, services

router = APIRouter()

router.include_router(auth.router, tags=["auth"])
router.include_router(services.router, tags=["services"])
router.include_router(bookings.router, tags=["bookings"])
router.include_router(reviews.router, tags=["reviews"])
