"""
Sign-in session backing each issued access token.

A token is only honoured while its session row is active: not revoked by
sign-out and not past expires_at.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Column, ForeignKey, Uuid, func

from event_hub.db.base import Base, UTCDateTime, new_uuid, utcnow


class AuthSession(Base):
    __tablename__ = "auth_sessions"

    id = Column(Uuid, primary_key=True, default=new_uuid)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow, server_default=func.now())
    expires_at = Column(UTCDateTime, nullable=False)
    revoked_at = Column(UTCDateTime, nullable=True)

    def is_active(self, now: Optional[datetime] = None) -> bool:
        now = now or utcnow()
        return self.revoked_at is None and self.expires_at > now

    def __repr__(self) -> str:
        return f"<AuthSession(id={self.id}, user={self.user_id}, revoked={self.revoked_at is not None})>"
