"""
Notification queue service.

Rows are enqueued by any authenticated producer and read back by their
recipient. Nothing here computes scheduled_for from reminder preferences
or marks rows as sent; there is no dispatcher.
"""

from event_hub.core.logging import get_logger
from event_hub.models.notification import EventNotification
from event_hub.schemas.notification import NotificationCreate
from event_hub.store.store import RowSecureStore

logger = get_logger(__name__)


async def enqueue_notification(store: RowSecureStore, data: NotificationCreate) -> EventNotification:
    """Queue a notification for any user. Unknown event or user ids are constraint violations."""
    notification = await store.insert(
        EventNotification(
            event_id=data.event_id,
            user_id=data.user_id,
            notification_type=data.notification_type.value,
            message=data.message,
            scheduled_for=data.scheduled_for,
        )
    )
    logger.info(
        "notification_enqueued",
        notification_id=str(notification.id),
        event_id=str(data.event_id),
        recipient=str(data.user_id),
        notification_type=notification.notification_type,
    )
    return notification


async def list_my_notifications(
    store: RowSecureStore,
    pending_only: bool = False,
    page: int = 1,
    page_size: int = 50,
) -> list[EventNotification]:
    criteria = [EventNotification.user_id == store.principal.user_id]
    if pending_only:
        criteria.append(EventNotification.sent_at.is_(None))
    return await store.select(
        EventNotification,
        *criteria,
        order_by=(EventNotification.scheduled_for.asc(),),
        offset=(page - 1) * page_size,
        limit=page_size,
    )
