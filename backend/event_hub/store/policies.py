"""
Row-level policy set.

ACCESS MODEL
============

This table is the only authorization logic in the service. Each policy names
a table and an operation and carries one or both of:

  using  - an SQL predicate selecting the existing rows the caller may act on
           (SELECT, UPDATE, DELETE)
  check  - a Python predicate over the row being written (INSERT, UPDATE)

Policies for the same (table, operation) are permissive: a row is admitted
if ANY of them admits it. A (table, operation) pair with no policy denies
everything, which is how profiles have no delete and notifications cannot be
updated or deleted by anyone.

Anonymous callers match no ownership predicate (the predicate compiles to
FALSE instead of `created_by IS NULL`), so they see public events only.

The system principal bypasses nothing except the explicit SYSTEM_GRANTS.
"""

import enum
from dataclasses import dataclass
from typing import Any, Callable, Optional

from sqlalchemy import exists, false, or_
from sqlalchemy.sql.elements import ColumnElement

from event_hub.core.errors import PolicyViolationError
from event_hub.core.logging import get_logger
from event_hub.core.metrics import record_policy_violation
from event_hub.models.event import Event
from event_hub.models.notification import EventNotification
from event_hub.models.profile import Profile
from event_hub.models.registration import EventRegistration
from event_hub.store.principal import Principal

logger = get_logger(__name__)


class Operation(str, enum.Enum):
    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class Policy:
    name: str
    table: str
    operation: Operation
    using: Optional[Callable[[Principal], ColumnElement]] = None
    check: Optional[Callable[[Principal, Any], bool]] = None


def _owns(column, principal: Principal) -> ColumnElement:
    if principal.user_id is None:
        return false()
    return column == principal.user_id


def _is_owner(row_user_id, principal: Principal) -> bool:
    return principal.user_id is not None and row_user_id == principal.user_id


def _creator_of_registered_event(principal: Principal) -> ColumnElement:
    if principal.user_id is None:
        return false()
    return exists().where(
        Event.id == EventRegistration.event_id,
        Event.created_by == principal.user_id,
    )


S, I, U, D = Operation.SELECT, Operation.INSERT, Operation.UPDATE, Operation.DELETE

POLICIES: tuple[Policy, ...] = (
    # events
    Policy("Public events are viewable by everyone", "events", S,
           using=lambda p: Event.is_public.is_(True)),
    Policy("Users can view their own events", "events", S,
           using=lambda p: _owns(Event.created_by, p)),
    Policy("Authenticated users can create events", "events", I,
           check=lambda p, row: _is_owner(row.created_by, p)),
    Policy("Users can update their own events", "events", U,
           using=lambda p: _owns(Event.created_by, p),
           check=lambda p, row: _is_owner(row.created_by, p)),
    Policy("Users can delete their own events", "events", D,
           using=lambda p: _owns(Event.created_by, p)),

    # event_registrations
    Policy("Users can view their own registrations", "event_registrations", S,
           using=lambda p: _owns(EventRegistration.user_id, p)),
    Policy("Event creators can view all registrations for their events", "event_registrations", S,
           using=_creator_of_registered_event),
    Policy("Users can register for events", "event_registrations", I,
           check=lambda p, row: _is_owner(row.user_id, p)),
    Policy("Users can cancel their own registrations", "event_registrations", U,
           using=lambda p: _owns(EventRegistration.user_id, p),
           check=lambda p, row: _is_owner(row.user_id, p)),
    Policy("Users can delete their own registrations", "event_registrations", D,
           using=lambda p: _owns(EventRegistration.user_id, p)),

    # profiles
    Policy("Users can view their own profile", "profiles", S,
           using=lambda p: _owns(Profile.user_id, p)),
    Policy("Users can create their own profile", "profiles", I,
           check=lambda p, row: _is_owner(row.user_id, p)),
    Policy("Users can update their own profile", "profiles", U,
           using=lambda p: _owns(Profile.user_id, p),
           check=lambda p, row: _is_owner(row.user_id, p)),

    # event_notifications
    Policy("Users can view their own notifications", "event_notifications", S,
           using=lambda p: _owns(EventNotification.user_id, p)),
    # Producers are outside per-user trust boundaries
    Policy("System can create notifications", "event_notifications", I,
           check=lambda p, row: True),
)

# The only writes the system principal may perform
SYSTEM_GRANTS = frozenset({
    ("profiles", Operation.INSERT),
})


def policies_for(table: str, operation: Operation) -> list[Policy]:
    return [p for p in POLICIES if p.table == table and p.operation == operation]


def row_filter(table: str, operation: Operation, principal: Principal) -> ColumnElement:
    """SQL predicate admitting the existing rows `principal` may act on."""
    if principal.is_system:
        return false()
    clauses = [p.using(principal) for p in policies_for(table, operation) if p.using is not None]
    if not clauses:
        return false()
    return or_(*clauses)


def is_write_allowed(table: str, operation: Operation, principal: Principal, row: Any) -> bool:
    if principal.is_system:
        return (table, operation) in SYSTEM_GRANTS
    checks = [p.check for p in policies_for(table, operation) if p.check is not None]
    return any(check(principal, row) for check in checks)


def authorize_write(table: str, operation: Operation, principal: Principal, row: Any) -> None:
    """Raise PolicyViolationError unless some policy admits writing `row`."""
    if not is_write_allowed(table, operation, principal, row):
        deny(table, operation, principal)


def deny(table: str, operation: Operation, principal: Principal) -> None:
    record_policy_violation(table, operation.value)
    logger.warning("policy_violation", table=table, operation=operation.value, principal=str(principal))
    raise PolicyViolationError(table, operation.value)
