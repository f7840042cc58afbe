"""
Pending notification for a user about an event.

sent_at stays null until something dispatches the row. Nothing in this
service dispatches; rows are only enqueued and read back.
"""

import enum

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Text, Uuid, func

from event_hub.db.base import Base, UTCDateTime, new_uuid, utcnow


class NotificationType(str, enum.Enum):
    reminder = "reminder"
    change = "change"
    cancellation = "cancellation"


class EventNotification(Base):
    __tablename__ = "event_notifications"

    id = Column(Uuid, primary_key=True, default=new_uuid)
    event_id = Column(Uuid, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    notification_type = Column(Text, nullable=False)
    message = Column(Text, nullable=False)
    scheduled_for = Column(UTCDateTime, nullable=False)
    sent_at = Column(UTCDateTime, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow, server_default=func.now())

    __table_args__ = (
        CheckConstraint(
            "notification_type IN ('reminder', 'change', 'cancellation')",
            name="event_notifications_notification_type_check",
        ),
        Index("idx_event_notifications_user_id", "user_id"),
        Index("idx_event_notifications_scheduled_for", "scheduled_for"),
    )

    def __repr__(self) -> str:
        return f"<EventNotification(id={self.id}, type={self.notification_type}, user={self.user_id})>"
