"""Domain entities exposed by the application."""

from .auth_context import AuthContext
from .notification import (
    DELIVERY_CHANNEL_ALL,
    DELIVERY_CHANNEL_HTTP,
    DELIVERY_CHANNEL_WEBSOCKET,
    DELIVERY_CHANNELS,
    DELIVERY_STATUS_DELIVERED,
    DELIVERY_STATUS_FAILED,
    DELIVERY_STATUS_PENDING,
    DELIVERY_STATUS_PENDING_HTTP,
    DELIVERY_STATUS_SENDING,
    DELIVERY_STATUSES,
    NOTIFICATION_TYPE_ERROR,
    NOTIFICATION_TYPE_INFO,
    NOTIFICATION_TYPE_SUCCESS,
    NOTIFICATION_TYPE_WARNING,
    NOTIFICATION_TYPES,
    FanOutItem,
    FanOutResult,
    Notification,
    NotificationCounts,
    NotificationPage,
    NotificationTemplate,
    RelatedEntity,
)
from .payment import PaymentSummary
from .service_request import ServiceRequestSummary

__all__ = [
    "AuthContext",
    "DELIVERY_CHANNEL_ALL",
    "DELIVERY_CHANNEL_HTTP",
    "DELIVERY_CHANNEL_WEBSOCKET",
    "DELIVERY_CHANNELS",
    "DELIVERY_STATUS_DELIVERED",
    "DELIVERY_STATUS_FAILED",
    "DELIVERY_STATUS_PENDING",
    "DELIVERY_STATUS_PENDING_HTTP",
    "DELIVERY_STATUS_SENDING",
    "DELIVERY_STATUSES",
    "NOTIFICATION_TYPE_ERROR",
    "NOTIFICATION_TYPE_INFO",
    "NOTIFICATION_TYPE_SUCCESS",
    "NOTIFICATION_TYPE_WARNING",
    "NOTIFICATION_TYPES",
    "FanOutItem",
    "FanOutResult",
    "Notification",
    "NotificationCounts",
    "NotificationPage",
    "NotificationTemplate",
    "RelatedEntity",
    "PaymentSummary",
    "ServiceRequestSummary",
]
