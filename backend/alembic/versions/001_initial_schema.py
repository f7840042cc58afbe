"""Initial schema: identities, sessions, events, registrations, profiles, notifications.

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _uuid_pk() -> sa.Column:
    return sa.Column("id", sa.Uuid(), primary_key=True, server_default=sa.text("gen_random_uuid()"))


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    if nullable:
        return sa.Column(name, sa.DateTime(timezone=True), nullable=True)
    return sa.Column(name, sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())


def upgrade() -> None:
    # Users table
    op.create_table(
        "users",
        _uuid_pk(),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("user_metadata", postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # Sessions backing issued tokens
    op.create_table(
        "auth_sessions",
        _uuid_pk(),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        _timestamp("created_at"),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        _timestamp("revoked_at", nullable=True),
    )
    op.create_index("ix_auth_sessions_user_id", "auth_sessions", ["user_id"])

    # Events table
    op.create_table(
        "events",
        _uuid_pk(),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("location", sa.Text(), nullable=True),
        sa.Column("max_attendees", sa.Integer(), nullable=True),
        sa.Column("created_by", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=True),
        sa.Column("is_public", sa.Boolean(), nullable=True, server_default=sa.text("true")),
        sa.Column("event_type", sa.String(50), nullable=True, server_default=sa.text("'general'")),
        sa.Column("metadata", postgresql.JSONB(), nullable=True, server_default=sa.text("'{}'::jsonb")),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    # Calendar views filter and sort by start_time; "my events" and the
    # creator visibility policy filter by created_by
    op.create_index("idx_events_start_time", "events", ["start_time"])
    op.create_index("idx_events_created_by", "events", ["created_by"])

    # Registrations table
    op.create_table(
        "event_registrations",
        _uuid_pk(),
        sa.Column("event_id", sa.Uuid(), sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        _timestamp("registered_at"),
        sa.Column("status", sa.String(20), nullable=True, server_default=sa.text("'registered'")),
        sa.UniqueConstraint("event_id", "user_id", name="event_registrations_event_id_user_id_key"),
        sa.CheckConstraint(
            "status IN ('registered', 'cancelled', 'waitlist')",
            name="event_registrations_status_check",
        ),
    )
    op.create_index("idx_event_registrations_event_id", "event_registrations", ["event_id"])
    op.create_index("idx_event_registrations_user_id", "event_registrations", ["user_id"])

    # Profiles table
    op.create_table(
        "profiles",
        _uuid_pk(),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("display_name", sa.Text(), nullable=True),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column(
            "notification_preferences",
            postgresql.JSONB(),
            nullable=True,
            server_default=sa.text(
                """'{"email": true, "push": false, "reminder_times": [24, 1]}'::jsonb"""
            ),
        ),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )

    # Notification queue
    op.create_table(
        "event_notifications",
        _uuid_pk(),
        sa.Column("event_id", sa.Uuid(), sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("notification_type", sa.Text(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("scheduled_for", sa.DateTime(timezone=True), nullable=False),
        _timestamp("sent_at", nullable=True),
        _timestamp("created_at"),
        sa.CheckConstraint(
            "notification_type IN ('reminder', 'change', 'cancellation')",
            name="event_notifications_notification_type_check",
        ),
    )
    op.create_index("idx_event_notifications_user_id", "event_notifications", ["user_id"])
    op.create_index("idx_event_notifications_scheduled_for", "event_notifications", ["scheduled_for"])


def downgrade() -> None:
    op.drop_table("event_notifications")
    op.drop_table("profiles")
    op.drop_table("event_registrations")
    op.drop_table("events")
    op.drop_table("auth_sessions")
    op.drop_table("users")
