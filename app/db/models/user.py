from sqlalchemy import Column, String, DateTime, Enum, Uuid
import uuid
from app.db.session import Base
from app.db.models.base import utcnow
import enum

class RoleEnum(str, enum.Enum):
    attendee = "attendee"
    organizer = "organizer"

class User(Base):
    __tablename__ = "users"
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    # Always stored lowercase; see repositories.users.normalize_email
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    role = Column(Enum(RoleEnum), default=RoleEnum.attendee, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
