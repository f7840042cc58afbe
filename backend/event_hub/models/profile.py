"""
Profile model, one per identity.

Rows are created by the identity-bootstrap trigger, never by sign-up code
directly, and afterwards only updated by their owner.
"""

from sqlalchemy import Column, ForeignKey, Text, Uuid

from event_hub.db.base import Base, JSONDocument, TimestampMixin, new_uuid

# Reminder offsets are hours before the event start
REMINDER_TIME_OPTIONS = (168, 72, 24, 12, 6, 3, 1, 0.5, 0.25)


def default_notification_preferences() -> dict:
    return {"email": True, "push": False, "reminder_times": [24, 1]}


class Profile(Base, TimestampMixin):
    __tablename__ = "profiles"

    id = Column(Uuid, primary_key=True, default=new_uuid)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    display_name = Column(Text, nullable=True)
    email = Column(Text, nullable=True)
    avatar_url = Column(Text, nullable=True)
    notification_preferences = Column(JSONDocument, nullable=True, default=default_notification_preferences)

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, user={self.user_id}, name={self.display_name})>"
