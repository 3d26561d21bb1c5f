"""Realtime notification helpers for the infrastructure layer."""

from .manager import NotificationConnectionManager, notification_manager
from .publisher import (
    NEW_NOTIFICATION_EVENT,
    NotificationPublisher,
    notification_publisher,
    serialize_notification,
)
from .realtime import (
    DELETED_EVENT,
    READ_EVENT,
    RealtimeEventPublisher,
    dispatch_realtime_event,
    realtime_event_publisher,
)

__all__ = [
    "NotificationConnectionManager",
    "notification_manager",
    "NEW_NOTIFICATION_EVENT",
    "NotificationPublisher",
    "notification_publisher",
    "serialize_notification",
    "DELETED_EVENT",
    "READ_EVENT",
    "RealtimeEventPublisher",
    "realtime_event_publisher",
    "dispatch_realtime_event",
]
