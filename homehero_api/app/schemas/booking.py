"""
Pydantic models for bookings.

A booking ties one customer email to one service.  Status is an open
string; the values used by the application are ``pending``,
``completed`` and ``cancelled``.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import CamelModel
from .service import ServiceRead


BOOKING_PENDING = "pending"
BOOKING_COMPLETED = "completed"
BOOKING_CANCELLED = "cancelled"


class BookingCreate(CamelModel):
    """Schema for creating a booking.

    ``user_email`` defaults to the caller's verified email.  The
    remaining fields are free-form details passed on to the provider.
    """

    service_id: str = Field(..., min_length=1)
    user_email: Optional[str] = None
    user_name: Optional[str] = None
    booking_date: Optional[str] = Field(None, description="Requested date, as entered by the customer")
    address: Optional[str] = None
    notes: Optional[str] = None


class BookingRead(CamelModel):
    id: str = Field(..., alias="_id")
    service_id: str
    user_email: str
    user_name: Optional[str] = None
    booking_date: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    status: str
    created_at: datetime


class BookingWithService(BookingRead):
    """Booking joined with the current document of the booked service.

    ``service`` is ``None`` when the service no longer exists.
    """

    service: Optional[ServiceRead] = None
