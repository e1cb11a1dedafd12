"""
Business logic for the service catalog.

``CatalogService`` lists, filters and sorts services, and lets a
provider create, patch and delete their own listings.  Deleting a
service removes the bookings that reference it in the same
transaction, dependents first.

The module-level helpers (``fetch_services`` and friends) build
``ServiceRead`` documents with their embedded reviews; the booking
service reuses them to join services into a customer's bookings.
"""

import logging
import sqlite3
import uuid
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from ..core.db import Database
from ..core.errors import ForbiddenError, NotFoundError
from ..schemas.review import ReviewRead
from ..schemas.service import DeleteResult, ServiceCreate, ServiceRead, ServiceUpdate


logger = logging.getLogger(__name__)

# Seed rating for a service nobody has reviewed yet.
DEFAULT_AVERAGE_RATING = 4.5

TOP_RATED_MIN_RATING = 4
TOP_RATED_LIMIT = 6

SERVICE_COLUMNS = (
    "id, service_name, category, price, description, provider_email, provider_name, "
    "image_url, average_rating, created_at, updated_at"
)

SORT_ORDERS = {
    "price-asc": "price ASC",
    "price-desc": "price DESC",
    "rating-desc": "average_rating DESC",
    # Older web clients send plain "rating".
    "rating": "average_rating DESC",
}


def utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    return uuid.uuid4().hex


def fetch_reviews(cursor: sqlite3.Cursor, service_ids: Iterable[str]) -> Dict[str, List[ReviewRead]]:
    """Return the reviews of each service in insertion order."""
    ids = list(service_ids)
    if not ids:
        return {}
    placeholders = ", ".join("?" for _ in ids)
    rows = cursor.execute(
        f"SELECT service_id, user_email, user_name, rating, comment, date FROM reviews "
        f"WHERE service_id IN ({placeholders}) ORDER BY id",
        tuple(ids),
    ).fetchall()
    grouped: Dict[str, List[ReviewRead]] = defaultdict(list)
    for row in rows:
        grouped[row["service_id"]].append(
            ReviewRead(
                user_email=row["user_email"],
                user_name=row["user_name"],
                rating=row["rating"],
                comment=row["comment"],
                date=row["date"],
            )
        )
    return grouped


def fetch_services(
    cursor: sqlite3.Cursor,
    where: Optional[List[str]] = None,
    params: Optional[List[Any]] = None,
    order_by: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[ServiceRead]:
    """Run a filtered service query and attach reviews to every row."""
    query = f"SELECT {SERVICE_COLUMNS} FROM services"
    params = list(params or [])
    if where:
        query += " WHERE " + " AND ".join(where)
    # rowid keeps insertion order stable when sort keys tie
    query += f" ORDER BY {order_by}, rowid" if order_by else " ORDER BY rowid"
    if limit:
        query += " LIMIT ?"
        params.append(limit)
    rows = cursor.execute(query, tuple(params)).fetchall()
    reviews = fetch_reviews(cursor, (row["id"] for row in rows))
    return [
        ServiceRead(
            id=row["id"],
            service_name=row["service_name"],
            category=row["category"],
            price=row["price"],
            description=row["description"],
            provider_email=row["provider_email"],
            provider_name=row["provider_name"],
            image_url=row["image_url"],
            average_rating=row["average_rating"],
            reviews=reviews.get(row["id"], []),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
        for row in rows
    ]


def fetch_service(cursor: sqlite3.Cursor, service_id: str) -> Optional[ServiceRead]:
    services = fetch_services(cursor, ["id = ?"], [service_id])
    return services[0] if services else None


def fetch_services_by_ids(cursor: sqlite3.Cursor, service_ids: Iterable[str]) -> Dict[str, ServiceRead]:
    ids = list(dict.fromkeys(service_ids))
    if not ids:
        return {}
    placeholders = ", ".join("?" for _ in ids)
    services = fetch_services(cursor, [f"id IN ({placeholders})"], ids)
    return {service.id: service for service in services}


class CatalogService:
    """Listing, lookup and provider-side management of services."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def list_services(
        self,
        category: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[ServiceRead]:
        """Return services matching every supplied filter.

        - ``category``: exact match; the value ``all`` disables the filter.
        - ``min_price`` / ``max_price``: inclusive bounds, each optional.
        - ``search``: case-insensitive substring of name, category or
          description.
        - ``sort_by``: ``price-asc``, ``price-desc`` or ``rating-desc``;
          other values keep store order.
        - ``limit``: maximum number of results; ``0`` or ``None`` means no cap.
        """
        where: List[str] = []
        params: List[Any] = []
        if category and category != "all":
            where.append("category = ?")
            params.append(category)
        if min_price is not None:
            where.append("price >= ?")
            params.append(min_price)
        if max_price is not None:
            where.append("price <= ?")
            params.append(max_price)
        if search:
            needle = search.casefold()
            where.append(
                "(instr(casefold(service_name), ?) > 0 OR instr(casefold(category), ?) > 0 "
                "OR instr(casefold(description), ?) > 0)"
            )
            params.extend([needle, needle, needle])
        with self.db.transaction() as cursor:
            return fetch_services(cursor, where, params, SORT_ORDERS.get(sort_by or ""), limit)

    async def get_service(self, service_id: str) -> ServiceRead:
        with self.db.transaction() as cursor:
            service = fetch_service(cursor, service_id)
        if service is None:
            raise NotFoundError("Service not found")
        return service

    async def list_provider_services(self, provider_email: str) -> List[ServiceRead]:
        with self.db.transaction() as cursor:
            return fetch_services(cursor, ["provider_email = ?"], [provider_email])

    async def create_service(self, data: ServiceCreate, current_user: dict) -> ServiceRead:
        """List a new service for the caller.

        The rating starts at ``DEFAULT_AVERAGE_RATING`` with no reviews.
        A provider email naming someone other than the caller is
        rejected.
        """
        caller_email = current_user.get("email")
        provider_email = data.provider_email or caller_email
        if not caller_email or provider_email != caller_email:
            raise ForbiddenError()
        service_id = new_id()
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                INSERT INTO services (id, service_name, category, price, description, provider_email,
                                      provider_name, image_url, average_rating, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    service_id,
                    data.service_name,
                    data.category,
                    data.price,
                    data.description,
                    provider_email,
                    data.provider_name,
                    data.image_url,
                    DEFAULT_AVERAGE_RATING,
                    utcnow(),
                ),
            )
            service = fetch_service(cursor, service_id)
        logger.info("Provider %s listed service %s (%s)", provider_email, service_id, data.service_name)
        return service

    def _require_owner(self, cursor: sqlite3.Cursor, service_id: str, email: str) -> None:
        # Missing services and foreign services get the same answer.
        row = cursor.execute("SELECT provider_email FROM services WHERE id = ?", (service_id,)).fetchone()
        if not row or row["provider_email"] != email:
            logger.warning("User %s may not modify service %s", email, service_id)
            raise ForbiddenError()

    async def update_service(self, service_id: str, updates: ServiceUpdate, email: str) -> ServiceRead:
        """Apply a partial update and return the updated document."""
        changes = {k: v for k, v in updates.model_dump(exclude_unset=True).items() if v is not None}
        changes["updated_at"] = utcnow()
        assignments = ", ".join(f"{column} = ?" for column in changes)
        with self.db.transaction() as cursor:
            self._require_owner(cursor, service_id, email)
            cursor.execute(
                f"UPDATE services SET {assignments} WHERE id = ?",
                (*changes.values(), service_id),
            )
            service = fetch_service(cursor, service_id)
        logger.info("Service %s updated by %s: %s", service_id, email, sorted(changes))
        return service

    async def delete_service(self, service_id: str, email: str) -> DeleteResult:
        """Delete a service and every booking that references it."""
        with self.db.transaction() as cursor:
            self._require_owner(cursor, service_id, email)
            deleted_bookings = cursor.execute(
                "DELETE FROM bookings WHERE service_id = ?", (service_id,)
            ).rowcount
            cursor.execute("DELETE FROM reviews WHERE service_id = ?", (service_id,))
            deleted = cursor.execute("DELETE FROM services WHERE id = ?", (service_id,)).rowcount
        logger.info(
            "Service %s deleted by %s together with %s booking(s)", service_id, email, deleted_bookings
        )
        return DeleteResult(deleted_count=deleted, deleted_bookings=deleted_bookings)

    async def top_rated(self) -> List[ServiceRead]:
        with self.db.transaction() as cursor:
            return fetch_services(
                cursor,
                ["average_rating >= ?"],
                [TOP_RATED_MIN_RATING],
                "average_rating DESC",
                TOP_RATED_LIMIT,
            )

    async def list_categories(self) -> List[str]:
        with self.db.transaction() as cursor:
            rows = cursor.execute("SELECT DISTINCT category FROM services ORDER BY category").fetchall()
        return [row["category"] for row in rows]
