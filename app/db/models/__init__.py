"""Database models package."""
from app.db.models.user import User, RoleEnum
from app.db.models.event import Event
from app.db.models.registration import Registration

__all__ = ["User", "RoleEnum", "Event", "Registration"]
