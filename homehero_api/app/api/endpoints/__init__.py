"""
Endpoint modules.

Each module defines an ``APIRouter`` for one domain (auth, services,
bookings, reviews).
"""
