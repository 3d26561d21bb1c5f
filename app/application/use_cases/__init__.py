"""Aggregate application use cases."""

from .notifications import (
    create_notification,
    create_notifications_for_users,
    notify_payment,
    notify_payment_participants,
    notify_service_request,
)

__all__ = [
    "create_notification",
    "create_notifications_for_users",
    "notify_payment",
    "notify_payment_participants",
    "notify_service_request",
]
