"""
FastAPI dependencies wiring service objects to the shared store client.
"""

from fastapi import Depends

from ..core.db import Database, get_db
from ..services.booking_service import BookingService
from ..services.catalog_service import CatalogService
from ..services.review_service import ReviewService


def get_catalog_service(db: Database = Depends(get_db)) -> CatalogService:
    return CatalogService(db)


def get_booking_service(db: Database = Depends(get_db)) -> BookingService:
    return BookingService(db)


def get_review_service(db: Database = Depends(get_db)) -> ReviewService:
    return ReviewService(db)
