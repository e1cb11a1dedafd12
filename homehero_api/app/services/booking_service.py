"""
Business logic for bookings.

A customer books a service by id.  Two rules are enforced before the
row is written:

* a provider cannot book a service they list themselves;
* a customer holds at most one non-cancelled booking per service.

The second rule is also backed by a partial unique index, so a request
that loses a race against an identical one is rejected the same way as
one caught by the pre-check.

Cancelling a booking deletes the row.
"""

import logging
import sqlite3
from typing import List, Optional

from ..core.db import Database
from ..core.errors import ForbiddenError, InvalidOperationError, NotFoundError
from ..schemas.booking import (
    BOOKING_CANCELLED,
    BOOKING_PENDING,
    BookingCreate,
    BookingRead,
    BookingWithService,
)
from ..schemas.service import DeleteResult
from .catalog_service import fetch_services_by_ids, new_id, utcnow


logger = logging.getLogger(__name__)

BOOKING_COLUMNS = "id, service_id, user_email, user_name, booking_date, address, notes, status, created_at"

SELF_BOOKING_MESSAGE = "You cannot book your own service"
DUPLICATE_BOOKING_MESSAGE = "You have already booked this service"


def find_active_booking(cursor: sqlite3.Cursor, user_email: str, service_id: str) -> Optional[sqlite3.Row]:
    """Return the customer's non-cancelled booking for ``service_id``, if any."""
    return cursor.execute(
        "SELECT id FROM bookings WHERE user_email = ? AND service_id = ? AND status != ?",
        (user_email, service_id, BOOKING_CANCELLED),
    ).fetchone()


class BookingService:
    """Service for creating, listing and cancelling bookings."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def create_booking(self, data: BookingCreate, current_user: dict) -> BookingRead:
        """Create a pending booking for the caller.

        Raises ``NotFoundError`` when the service does not exist and
        ``InvalidOperationError`` for self-booking or a duplicate active
        booking.
        """
        caller_email = current_user.get("email")
        user_email = data.user_email or caller_email
        if not caller_email or user_email != caller_email:
            raise ForbiddenError()

        booking_id = new_id()
        with self.db.transaction() as cursor:
            service = cursor.execute(
                "SELECT provider_email FROM services WHERE id = ?",
                (data.service_id,),
            ).fetchone()
            if not service:
                raise NotFoundError("Service not found")
            if service["provider_email"] == user_email:
                raise InvalidOperationError(SELF_BOOKING_MESSAGE)

            if find_active_booking(cursor, user_email, data.service_id):
                raise InvalidOperationError(DUPLICATE_BOOKING_MESSAGE)

            try:
                cursor.execute(
                    """
                    INSERT INTO bookings (id, service_id, user_email, user_name, booking_date,
                                          address, notes, status, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        booking_id,
                        data.service_id,
                        user_email,
                        data.user_name,
                        data.booking_date,
                        data.address,
                        data.notes,
                        BOOKING_PENDING,
                        utcnow(),
                    ),
                )
            except sqlite3.IntegrityError as exc:
                # A concurrent request inserted the same active booking first.
                raise InvalidOperationError(DUPLICATE_BOOKING_MESSAGE) from exc
            row = cursor.execute(
                f"SELECT {BOOKING_COLUMNS} FROM bookings WHERE id = ?", (booking_id,)
            ).fetchone()
        logger.info("User %s booked service %s (booking %s)", user_email, data.service_id, booking_id)
        return BookingRead(**dict(row))

    async def list_bookings(self, user_email: str) -> List[BookingWithService]:
        """List the customer's bookings, each joined with its service.

        Services are read in one batch; the bookings keep their
        insertion order.
        """
        with self.db.transaction() as cursor:
            rows = cursor.execute(
                f"SELECT {BOOKING_COLUMNS} FROM bookings WHERE user_email = ? ORDER BY rowid",
                (user_email,),
            ).fetchall()
            services = fetch_services_by_ids(cursor, (row["service_id"] for row in rows))
        return [
            BookingWithService(**dict(row), service=services.get(row["service_id"]))
            for row in rows
        ]

    async def cancel_booking(self, booking_id: str, user_email: str) -> DeleteResult:
        """Delete a booking owned by ``user_email``.

        Unknown bookings and bookings of other customers are both
        answered with ``ForbiddenError``.
        """
        with self.db.transaction() as cursor:
            row = cursor.execute(
                "SELECT user_email FROM bookings WHERE id = ?", (booking_id,)
            ).fetchone()
            if not row or row["user_email"] != user_email:
                logger.warning("User %s may not cancel booking %s", user_email, booking_id)
                raise ForbiddenError()
            deleted = cursor.execute("DELETE FROM bookings WHERE id = ?", (booking_id,)).rowcount
        logger.info("Booking %s cancelled by %s", booking_id, user_email)
        return DeleteResult(deleted_count=deleted)
