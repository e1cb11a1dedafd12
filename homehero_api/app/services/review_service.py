"""
Business logic for reviews and the derived service rating.

Only a customer holding a pending or completed booking for a service
may review it, and only once.  Every accepted review triggers a full
recomputation of ``average_rating`` from the stored reviews: the
review list is the source of truth and the rating is derived from it.
The review insert and the rating update share one transaction.

Concurrent reviewers of the same service each recompute from what they
read, so the stored rating is last-writer-wins until the next review
or a ``recompute_rating`` pass.
"""

import logging
import math
import sqlite3
from typing import Dict, Iterable, Optional

from ..core.db import Database
from ..core.errors import ForbiddenError, InvalidOperationError, NotFoundError
from ..schemas.booking import BOOKING_COMPLETED, BOOKING_PENDING
from ..schemas.review import ReviewCreate, ReviewResult
from .catalog_service import DEFAULT_AVERAGE_RATING, utcnow


logger = logging.getLogger(__name__)

BOOKING_REQUIRED_MESSAGE = "You must book this service before reviewing"
DUPLICATE_REVIEW_MESSAGE = "You have already reviewed this service"


def average_rating(ratings: Iterable[float]) -> float:
    """Arithmetic mean of ``ratings``, or the seed rating when there are none."""
    values = list(ratings)
    if not values:
        return DEFAULT_AVERAGE_RATING
    return math.fsum(values) / len(values)


def find_review(cursor: sqlite3.Cursor, service_id: str, user_email: str) -> Optional[sqlite3.Row]:
    return cursor.execute(
        "SELECT id FROM reviews WHERE service_id = ? AND user_email = ?",
        (service_id, user_email),
    ).fetchone()


def _store_average(cursor: sqlite3.Cursor, service_id: str) -> float:
    rows = cursor.execute(
        "SELECT rating FROM reviews WHERE service_id = ? ORDER BY id", (service_id,)
    ).fetchall()
    rating = average_rating(row["rating"] for row in rows)
    cursor.execute("UPDATE services SET average_rating = ? WHERE id = ?", (rating, service_id))
    return rating


class ReviewService:
    """Service for submitting reviews and maintaining average ratings."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def add_review(self, service_id: str, data: ReviewCreate, current_user: dict) -> ReviewResult:
        """Append the caller's review to a service and refresh its rating.

        Raises ``ForbiddenError`` without a qualifying booking,
        ``NotFoundError`` if the service is gone and
        ``InvalidOperationError`` on a second review.
        """
        user_email = current_user.get("email")
        if not user_email:
            raise ForbiddenError()

        with self.db.transaction() as cursor:
            booking = cursor.execute(
                "SELECT id FROM bookings WHERE user_email = ? AND service_id = ? AND status IN (?, ?)",
                (user_email, service_id, BOOKING_PENDING, BOOKING_COMPLETED),
            ).fetchone()
            if not booking:
                raise ForbiddenError(BOOKING_REQUIRED_MESSAGE)

            service = cursor.execute("SELECT id FROM services WHERE id = ?", (service_id,)).fetchone()
            if not service:
                raise NotFoundError("Service not found")

            if find_review(cursor, service_id, user_email):
                raise InvalidOperationError(DUPLICATE_REVIEW_MESSAGE)

            try:
                cursor.execute(
                    """
                    INSERT INTO reviews (service_id, user_email, user_name, rating, comment, date)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        service_id,
                        user_email,
                        data.user_name or "Anonymous",
                        data.rating,
                        data.comment,
                        utcnow(),
                    ),
                )
            except sqlite3.IntegrityError as exc:
                raise InvalidOperationError(DUPLICATE_REVIEW_MESSAGE) from exc
            rating = _store_average(cursor, service_id)

        logger.info(
            "User %s reviewed service %s with %s; average rating now %s",
            user_email,
            service_id,
            data.rating,
            rating,
        )
        return ReviewResult(average_rating=rating)

    async def recompute_rating(self, service_id: Optional[str] = None) -> Dict[str, float]:
        """Re-derive ``average_rating`` from stored reviews.

        Repairs one service when ``service_id`` is given, otherwise every
        service.  Returns the new rating keyed by service id.
        """
        with self.db.transaction() as cursor:
            if service_id is not None:
                row = cursor.execute("SELECT id FROM services WHERE id = ?", (service_id,)).fetchone()
                if not row:
                    raise NotFoundError("Service not found")
                service_ids = [service_id]
            else:
                service_ids = [row["id"] for row in cursor.execute("SELECT id FROM services ORDER BY rowid")]
            ratings = {sid: _store_average(cursor, sid) for sid in service_ids}
        logger.info("Recomputed average rating of %s service(s)", len(ratings))
        return ratings
