#!/usr/bin/env python3
"""
Recompute the average rating of services from their stored reviews.

The review list is the source of truth for a service's rating.  Run
this after restoring a backup or whenever ``average_rating`` is
suspected to be stale.

Usage:
    python repair_ratings.py                       # every service, DATABASE_URL from env
    python repair_ratings.py --db ./homehero.db --service 3f2a...
"""

import argparse
import asyncio
import os
import sys

from homehero_api.app.core.config import settings
from homehero_api.app.core.db import Database, resolve_database_path
from homehero_api.app.core.errors import NotFoundError
from homehero_api.app.core.logging_config import setup_logging
from homehero_api.app.services.review_service import ReviewService


def main():
    ap = argparse.ArgumentParser(description="Recompute HomeHero service ratings (SQLite).")
    ap.add_argument("--db", default=settings.database_url, help="Path to SQLite DB file")
    ap.add_argument("--service", help="Only repair this service id")
    args = ap.parse_args()

    setup_logging(settings.log_level)

    if not os.path.exists(resolve_database_path(args.db)):
        print(f"[!] DB not found: {args.db}", file=sys.stderr)
        sys.exit(1)

    db = Database(args.db)
    db.init()
    try:
        ratings = asyncio.run(ReviewService(db).recompute_rating(args.service))
    except NotFoundError:
        print(f"[!] No service found with id: {args.service}", file=sys.stderr)
        sys.exit(2)

    for service_id, rating in ratings.items():
        print(f"{service_id}\t{rating}")
    print(f"[+] Recomputed {len(ratings)} service rating(s)")


if __name__ == "__main__":
    main()
