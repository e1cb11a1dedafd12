"""Print a bearer token for local testing.

Usage:
    python create_token.py provider@example.com [--days 30]
"""
import argparse
from datetime import timedelta

from homehero_api.app.core.security import create_access_token


def main():
    ap = argparse.ArgumentParser(description="Issue a HomeHero bearer token for an email.")
    ap.add_argument("email", help="Email to embed in the token")
    ap.add_argument("--days", type=int, default=None, help="Lifetime in days (default: ACCESS_TOKEN_EXPIRE_DAYS)")
    args = ap.parse_args()

    expires = timedelta(days=args.days) if args.days else None
    print(create_access_token({"email": args.email}, expires_delta=expires))


if __name__ == "__main__":
    main()
