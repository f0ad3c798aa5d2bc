"""
Repository layer for database operations.

Each store is a module of async functions that take the request's
``AsyncSession`` as their first argument.
"""
from app.db.repositories import users, events, registrations

__all__ = ["users", "events", "registrations"]
