"""
SQLite store client and simple migration system.

A single ``Database`` instance is built by ``create_app`` and kept on
``app.state.db``; services receive it through FastAPI dependencies
instead of reaching for a module-level connection.  ``Database.init``
runs once at startup, applies pending migrations and fails loudly
when the file cannot be opened, so a misconfigured deployment never
starts serving requests.

Each unit of work opens a short-lived connection through
``Database.transaction``, which commits on success and rolls back on
any exception.

Services and bookings live in their own tables.  Reviews are embedded
in the service document on the wire but are stored in a child table so
that the one-review-per-reviewer rule can be enforced by a unique
index.  Likewise a partial unique index rejects a second non-cancelled
booking for the same customer and service even when two requests race
past the application-level check.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Tuple

from fastapi import Request


logger = logging.getLogger(__name__)


MIGRATIONS: List[Tuple[int, str]] = [
    # Migration 1: Initial schema
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS services (
            id TEXT PRIMARY KEY,
            service_name TEXT NOT NULL,
            category TEXT NOT NULL,
            price REAL NOT NULL DEFAULT 0,
            description TEXT,
            provider_email TEXT NOT NULL,
            provider_name TEXT,
            image_url TEXT,
            average_rating REAL NOT NULL DEFAULT 4.5,
            created_at TIMESTAMP NOT NULL,
            updated_at TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS bookings (
            id TEXT PRIMARY KEY,
            service_id TEXT NOT NULL,
            user_email TEXT NOT NULL,
            user_name TEXT,
            booking_date TEXT,
            address TEXT,
            notes TEXT,
            status TEXT NOT NULL DEFAULT 'pending',
            created_at TIMESTAMP NOT NULL
        );

        CREATE TABLE IF NOT EXISTS reviews (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            service_id TEXT NOT NULL,
            user_email TEXT NOT NULL,
            user_name TEXT NOT NULL DEFAULT 'Anonymous',
            rating REAL NOT NULL,
            comment TEXT,
            date TIMESTAMP NOT NULL,
            FOREIGN KEY(service_id) REFERENCES services(id) ON DELETE CASCADE
        );
        """,
    ),
    # Migration 2: lookup indices and uniqueness guarantees
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_services_provider_email ON services(provider_email);
        CREATE INDEX IF NOT EXISTS idx_services_category ON services(category);
        CREATE INDEX IF NOT EXISTS idx_bookings_user_email ON bookings(user_email);
        CREATE INDEX IF NOT EXISTS idx_bookings_service_id ON bookings(service_id);
        -- At most one active (non-cancelled) booking per customer and service.
        CREATE UNIQUE INDEX IF NOT EXISTS uq_bookings_active
            ON bookings(user_email, service_id) WHERE status != 'cancelled';
        -- One review per reviewer and service.
        CREATE UNIQUE INDEX IF NOT EXISTS uq_reviews_service_user
            ON reviews(service_id, user_email);
        """,
    ),
]


class StoreUnavailableError(RuntimeError):
    """Raised at startup when the database cannot be opened or migrated."""


def _casefold(value):
    return value.casefold() if isinstance(value, str) else value


def resolve_database_path(database_url: str) -> str:
    """Return an absolute path for ``database_url``.

    Absolute paths are used as is; relative ones are resolved against
    the project root.
    """
    if os.path.isabs(database_url):
        return database_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / database_url).resolve())


class Database:
    """Store client shared by every request of one application instance."""

    def __init__(self, database_url: str) -> None:
        self.path = resolve_database_path(database_url)

    def connect(self) -> sqlite3.Connection:
        """Open a new connection with name-addressable rows and FK enforcement."""
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        # Unicode-aware lower-casing for search; SQLite's LIKE only folds ASCII.
        conn.create_function("casefold", 1, _casefold, deterministic=True)
        return conn

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Cursor]:
        """Yield a cursor; commit on success, roll back on error, always close."""
        conn = self.connect()
        try:
            yield conn.cursor()
            conn.commit()
        except BaseException:
            conn.rollback()
            raise
        finally:
            conn.close()

    def init(self) -> None:
        """Apply pending migrations.

        Creates the ``migrations`` bookkeeping table if needed and runs
        every entry of ``MIGRATIONS`` newer than the recorded version.
        """
        try:
            with self.transaction() as cursor:
                cursor.execute("CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)")
                row = cursor.execute("SELECT MAX(version) AS version FROM migrations").fetchone()
                current_version = row["version"] if row and row["version"] is not None else 0

                for version, sql in MIGRATIONS:
                    if version > current_version:
                        cursor.executescript(sql)
                        cursor.execute("INSERT INTO migrations (version) VALUES (?)", (version,))
                        current_version = version
                        logger.info("Applied migration %s", version)
        except sqlite3.Error as exc:
            logger.error("Cannot open database at %s: %s", self.path, exc)
            raise StoreUnavailableError(f"Cannot open database at {self.path}") from exc
        logger.info("Database ready at %s (schema version %s)", self.path, current_version)


def get_db(request: Request) -> Database:
    """FastAPI dependency returning the application's store client."""
    return request.app.state.db
