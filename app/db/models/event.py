from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Index, Uuid
import uuid
from sqlalchemy.orm import relationship
from app.db.session import Base
from app.db.models.base import utcnow

class Event(Base):
    __tablename__ = "events"
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    # Free-form strings, not validated as calendar values
    date = Column(String(64), nullable=False)
    time = Column(String(64), nullable=False)
    organizer_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    organizer = relationship("User", lazy="joined")
    # Read-only view of the registration rows; writes go through the registration store
    registrations = relationship(
        "Registration", viewonly=True, lazy="selectin", order_by="Registration.created_at"
    )

    __table_args__ = (
        Index('idx_event_organizer', 'organizer_id'),
        Index('idx_event_created_at', 'created_at'),
    )

    @property
    def participants(self):
        """Ids of registered users, in registration order."""
        return [r.user_id for r in self.registrations]
