"""
User model: the authenticated identity on whose behalf requests are made.

Key design decisions:
- `user_metadata` holds sign-up metadata (e.g. display_name) consumed by the
  identity-bootstrap trigger when it creates the profile
- Every other table references users with ON DELETE CASCADE, so removing an
  identity removes everything it owns
"""

from sqlalchemy import Column, String, Boolean, Uuid

from event_hub.db.base import Base, TimestampMixin, JSONDocument, new_uuid


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=new_uuid)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    user_metadata = Column(JSONDocument, nullable=False, default=dict)
    is_active = Column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
