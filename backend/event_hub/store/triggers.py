"""
Store-side triggers, registered as SQLAlchemy mapper events.

- Identity bootstrap: after a User row is inserted, insert its Profile in the
  same flush, acting as the system principal. If the profile insert fails the
  whole flush fails, so an identity never exists without its profile.
- Timestamp maintenance: before an Event or Profile row is updated, overwrite
  updated_at with the current time, whatever the caller supplied.

Bulk Core UPDATE statements bypass mapper events; all row writes go through
RowSecureStore, which uses the unit of work.
"""

from datetime import timedelta
from types import SimpleNamespace

from sqlalchemy import event, inspect

from event_hub.core.logging import get_logger
from event_hub.db.base import new_uuid, utcnow
from event_hub.models.event import Event
from event_hub.models.profile import Profile, default_notification_preferences
from event_hub.models.user import User
from event_hub.store import policies
from event_hub.store.policies import Operation
from event_hub.store.principal import Principal

logger = get_logger(__name__)

SYSTEM = Principal.system()


def profile_values_for(user: User) -> dict:
    metadata = user.user_metadata or {}
    now = utcnow()
    return {
        "id": new_uuid(),
        "user_id": user.id,
        "display_name": metadata.get("display_name") or user.email,
        "email": user.email,
        "notification_preferences": default_notification_preferences(),
        "created_at": now,
        "updated_at": now,
    }


@event.listens_for(User, "after_insert")
def create_profile_for_new_user(mapper, connection, target: User) -> None:
    values = profile_values_for(target)
    policies.authorize_write("profiles", Operation.INSERT, SYSTEM, SimpleNamespace(**values))
    connection.execute(Profile.__table__.insert().values(**values))
    logger.info("profile_bootstrapped", user_id=str(target.id))


def _previous_updated_at(target):
    history = inspect(target).attrs.updated_at.history
    if history.deleted:
        return history.deleted[0]
    if history.unchanged:
        return history.unchanged[0]
    return None


def touch_updated_at(mapper, connection, target) -> None:
    now = utcnow()
    previous = _previous_updated_at(target)
    if previous is not None and now <= previous:
        # Clock granularity or skew must never move updated_at backwards or leave it unchanged
        now = previous + timedelta(microseconds=1)
    target.updated_at = now


event.listen(Event, "before_update", touch_updated_at)
event.listen(Profile, "before_update", touch_updated_at)
