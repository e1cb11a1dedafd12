"""
Service layer.

Each service wraps the business rules of one domain and receives the
store client at construction time, so API handlers never touch SQL.
"""
