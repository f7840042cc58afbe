"""
Exception handlers mapping the error taxonomy to HTTP responses.

Every handled failure returns {"detail": <message>, "error": <code>}.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import InterfaceError, OperationalError

from event_hub.core.errors import EventHubError, EventFullError, PolicyViolationError, ValidationError
from event_hub.core.logging import get_logger
from event_hub.core.metrics import record_store_error

logger = get_logger(__name__)


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": message, "error": code})


async def event_hub_error_handler(request: Request, exc: EventHubError) -> JSONResponse:
    fields = {"error": exc.code, "status_code": exc.status_code, "message": exc.message}
    if isinstance(exc, PolicyViolationError):
        fields.update(table=exc.table, operation=exc.operation)
    elif isinstance(exc, EventFullError):
        fields.update(event_id=str(exc.event_id), max_attendees=exc.max_attendees)
    elif isinstance(exc, ValidationError) and exc.field:
        fields.update(field=exc.field)

    if exc.status_code >= 500:
        logger.error("request_error", **fields)
    else:
        logger.info("request_error", **fields)
    return _error_response(exc.status_code, exc.code, exc.message)


async def database_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    """Connectivity failures raised outside the store (e.g. by commit)."""
    record_store_error("store_unavailable")
    logger.error("store_unavailable", error=str(exc))
    return _error_response(503, "store_unavailable", "The data store is currently unavailable")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(EventHubError, event_hub_error_handler)
    app.add_exception_handler(OperationalError, database_unavailable_handler)
    app.add_exception_handler(InterfaceError, database_unavailable_handler)
