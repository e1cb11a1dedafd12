"""
Booking endpoints.

All routes require a bearer token.  Listing and cancelling also take
the caller's email as a query parameter, which must match the token.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from homehero_api.app.api.deps import get_booking_service
from homehero_api.app.core.errors import translate_store_errors
from homehero_api.app.core.security import get_current_user, require_email_match
from homehero_api.app.schemas.booking import BookingCreate, BookingRead, BookingWithService
from homehero_api.app.schemas.service import DeleteResult
from homehero_api.app.services.booking_service import BookingService


router = APIRouter()


@router.get("/bookings", response_model=List[BookingWithService], summary="List my bookings")
async def list_bookings(
    email: str = Depends(require_email_match),
    bookings: BookingService = Depends(get_booking_service),
) -> List[BookingWithService]:
    """Return the caller's bookings with the booked service embedded."""
    with translate_store_errors("Failed to fetch bookings"):
        return await bookings.list_bookings(email)


@router.post(
    "/bookings",
    response_model=BookingRead,
    status_code=status.HTTP_201_CREATED,
    summary="Book a service",
)
async def create_booking(
    data: BookingCreate,
    current_user: dict = Depends(get_current_user),
    bookings: BookingService = Depends(get_booking_service),
) -> BookingRead:
    """Create a pending booking.

    Fails with 400 when booking one's own service or when an active
    booking for the same service already exists, and with 404 when the
    service does not exist.
    """
    with translate_store_errors("Failed to create booking"):
        return await bookings.create_booking(data, current_user)


@router.delete("/bookings/{booking_id}", response_model=DeleteResult, summary="Cancel a booking")
async def cancel_booking(
    booking_id: str,
    email: str = Depends(require_email_match),
    bookings: BookingService = Depends(get_booking_service),
) -> DeleteResult:
    with translate_store_errors("Failed to cancel booking"):
        return await bookings.cancel_booking(booking_id, email)
