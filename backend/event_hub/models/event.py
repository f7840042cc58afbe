"""
Event model.

Key design decisions:
- `max_attendees` is optional; when set it bounds the number of registrations
  with status 'registered' (enforced by the registration capacity strategy)
- end_time is not constrained to follow start_time
- Index on `start_time` for calendar range queries, on `created_by` for
  "my events" and the creator-visibility policy
- The `metadata` column is mapped as `metadata_` because declarative models
  reserve the `metadata` attribute
"""

import enum

from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, String, Text, Uuid, text

from event_hub.db.base import Base, JSONDocument, TimestampMixin, UTCDateTime, new_uuid


class EventType(str, enum.Enum):
    general = "general"
    meeting = "meeting"
    workshop = "workshop"
    social = "social"
    conference = "conference"


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Uuid, primary_key=True, default=new_uuid)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    start_time = Column(UTCDateTime, nullable=False)
    end_time = Column(UTCDateTime, nullable=False)
    location = Column(Text, nullable=True)
    max_attendees = Column(Integer, nullable=True)
    created_by = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=True)
    is_public = Column(Boolean, nullable=True, default=True, server_default=text("true"))
    event_type = Column(String(50), nullable=True, default=EventType.general.value,
                        server_default=text("'general'"))
    metadata_ = Column("metadata", JSONDocument, nullable=True, default=dict)

    __table_args__ = (
        Index("idx_events_start_time", "start_time"),
        Index("idx_events_created_by", "created_by"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title}, max={self.max_attendees})>"
