"""
Registration model representing a user's sign-up for an event.

Key design decisions:
- Unique constraint on (event_id, user_id): one row per user per event, its
  status moves between registered / cancelled / waitlist
- Only 'registered' rows count against Event.max_attendees
"""

import enum

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, String, UniqueConstraint, Uuid, func, text

from event_hub.db.base import Base, UTCDateTime, new_uuid, utcnow


class RegistrationStatus(str, enum.Enum):
    registered = "registered"
    cancelled = "cancelled"
    waitlist = "waitlist"


class EventRegistration(Base):
    __tablename__ = "event_registrations"

    id = Column(Uuid, primary_key=True, default=new_uuid)
    event_id = Column(Uuid, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    registered_at = Column(UTCDateTime, nullable=False, default=utcnow, server_default=func.now())
    status = Column(String(20), nullable=True, default=RegistrationStatus.registered.value,
                    server_default=text("'registered'"))

    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="event_registrations_event_id_user_id_key"),
        CheckConstraint(
            "status IN ('registered', 'cancelled', 'waitlist')",
            name="event_registrations_status_check",
        ),
        Index("idx_event_registrations_event_id", "event_id"),
        Index("idx_event_registrations_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<EventRegistration(id={self.id}, event={self.event_id}, user={self.user_id}, status={self.status})>"
