"""Public helpers for storing, querying and emitting notifications."""

from .delivery import (
    deliver_notification,
    list_by_delivery_status,
    poll_notifications,
    retry_delivery,
    update_delivery_status,
)
from .errors import NotificationNotFoundError
from .events import (
    notify_payment,
    notify_payment_participants,
    notify_service_request,
)
from .store import (
    count_notifications,
    create_notification,
    create_notifications_for_users,
    delete_notifications,
    get_notification,
    list_notifications,
    mark_notifications_read,
)

__all__ = [
    "NotificationNotFoundError",
    "count_notifications",
    "create_notification",
    "create_notifications_for_users",
    "delete_notifications",
    "get_notification",
    "list_notifications",
    "mark_notifications_read",
    "deliver_notification",
    "list_by_delivery_status",
    "poll_notifications",
    "retry_delivery",
    "update_delivery_status",
    "notify_payment",
    "notify_payment_participants",
    "notify_service_request",
]
