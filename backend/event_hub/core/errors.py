"""
Error taxonomy for store and service failures.

Every failure a caller can observe falls into one of these categories. The
API layer maps each category to an HTTP status in one place
(see event_hub.api.errors) so services never build HTTP responses for them.
"""

from typing import Any, Optional


class EventHubError(Exception):
    """Base class for all handled failures."""

    code = "error"
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class PolicyViolationError(EventHubError):
    """The caller lacks rights over the row for this operation."""

    code = "policy_violation"
    status_code = 403

    def __init__(self, table: str, operation: str, message: Optional[str] = None):
        self.table = table
        self.operation = operation
        super().__init__(
            message or f"Operation '{operation}' on {table} violates row-level policy"
        )


class ConstraintViolationError(EventHubError):
    """A uniqueness, check or foreign-key constraint rejected the write."""

    code = "constraint_violation"
    status_code = 409


class EventFullError(ConstraintViolationError):
    code = "event_full"

    def __init__(self, event_id: Any, max_attendees: int):
        self.event_id = event_id
        self.max_attendees = max_attendees
        super().__init__(f"Event is full ({max_attendees} attendees max)")


class NotFoundError(EventHubError):
    code = "not_found"
    status_code = 404

    def __init__(self, resource: str, identifier: Any = None):
        self.resource = resource
        self.identifier = identifier
        if identifier is None:
            super().__init__(f"{resource} not found")
        else:
            super().__init__(f"{resource} {identifier} not found")


class StoreUnavailableError(EventHubError):
    """The database could not be reached or dropped the connection."""

    code = "store_unavailable"
    status_code = 503


class ValidationError(EventHubError):
    code = "validation_error"
    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)
