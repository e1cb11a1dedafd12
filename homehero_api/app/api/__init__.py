"""
HTTP layer.

Routers are defined per domain in ``endpoints`` and aggregated in
``router.py``, which the application includes at the root path.
"""
