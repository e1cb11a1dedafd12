"""
Pydantic schema definitions for API payloads.

Schemas are kept apart from the storage layout so the camelCase wire
format can evolve independently of the tables.
"""
