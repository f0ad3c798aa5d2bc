from sqlalchemy import Column, DateTime, ForeignKey, Index, UniqueConstraint, Uuid
import uuid
from sqlalchemy.orm import relationship
from app.db.session import Base
from app.db.models.base import utcnow

REGISTRATION_UNIQUE_CONSTRAINT = "uq_registration_event_user"

class Registration(Base):
    __tablename__ = "registrations"
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    event_id = Column(Uuid, ForeignKey("events.id"), nullable=False)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    user = relationship("User")
    event = relationship("Event")

    # One registration per user per event, enforced by the database
    __table_args__ = (
        UniqueConstraint('event_id', 'user_id', name=REGISTRATION_UNIQUE_CONSTRAINT),
        Index('idx_registration_user', 'user_id'),
        Index('idx_registration_event', 'event_id'),
    )
