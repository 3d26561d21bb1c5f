"""Domain entity representing a user notification."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

NOTIFICATION_TYPE_INFO = "info"
NOTIFICATION_TYPE_SUCCESS = "success"
NOTIFICATION_TYPE_WARNING = "warning"
NOTIFICATION_TYPE_ERROR = "error"

NOTIFICATION_TYPES = frozenset(
    {
        NOTIFICATION_TYPE_INFO,
        NOTIFICATION_TYPE_SUCCESS,
        NOTIFICATION_TYPE_WARNING,
        NOTIFICATION_TYPE_ERROR,
    }
)

DELIVERY_STATUS_PENDING = "pending"
DELIVERY_STATUS_SENDING = "sending"
DELIVERY_STATUS_DELIVERED = "delivered"
DELIVERY_STATUS_FAILED = "failed"
DELIVERY_STATUS_PENDING_HTTP = "pending_http"

DELIVERY_STATUSES = (
    DELIVERY_STATUS_PENDING,
    DELIVERY_STATUS_SENDING,
    DELIVERY_STATUS_DELIVERED,
    DELIVERY_STATUS_FAILED,
    DELIVERY_STATUS_PENDING_HTTP,
)

DELIVERY_CHANNEL_WEBSOCKET = "websocket"
DELIVERY_CHANNEL_HTTP = "http"
DELIVERY_CHANNEL_ALL = "all"

DELIVERY_CHANNELS = frozenset(
    {DELIVERY_CHANNEL_WEBSOCKET, DELIVERY_CHANNEL_HTTP, DELIVERY_CHANNEL_ALL}
)


@dataclass(frozen=True)
class RelatedEntity:
    """Soft pointer to the domain entity a notification talks about.

    The pair is never checked against the referenced table, so a deep link
    built from it may point at a record that no longer exists.
    """

    kind: str
    id: int


@dataclass
class Notification:
    """Information message delivered to a specific user."""

    id: int | None
    user_id: int
    title: str
    message: str
    type: str = NOTIFICATION_TYPE_INFO
    related: RelatedEntity | None = None
    is_read: bool = False
    actions: dict[str, dict[str, str]] | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    expires_at: datetime | None = None
    delivery_status: str = DELIVERY_STATUS_PENDING
    delivery_channel: str = DELIVERY_CHANNEL_ALL
    delivery_attempts: int = 0
    last_delivery_attempt: datetime | None = None


@dataclass
class NotificationTemplate:
    """Every notification field except the recipient, used for fan-out."""

    title: str
    message: str
    type: str = NOTIFICATION_TYPE_INFO
    related: RelatedEntity | None = None
    actions: dict[str, dict[str, str]] | None = None
    expires_at: datetime | None = None


@dataclass
class NotificationPage:
    """A page of notifications together with the user's aggregate counts."""

    items: list[Notification]
    total: int
    unread: int


@dataclass
class NotificationCounts:
    total: int
    unread: int
    by_status: dict[str, int] = field(default_factory=dict)


@dataclass
class FanOutItem:
    """Outcome of creating the notification for one recipient."""

    user_id: int
    notification: Notification | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.notification is not None


@dataclass
class FanOutResult:
    """Per-recipient outcome of a fan-out; creations are not atomic."""

    items: list[FanOutItem] = field(default_factory=list)

    @property
    def created(self) -> list[Notification]:
        return [item.notification for item in self.items if item.notification is not None]

    @property
    def failed_user_ids(self) -> list[int]:
        return [item.user_id for item in self.items if not item.succeeded]


__all__ = [
    "NOTIFICATION_TYPE_INFO",
    "NOTIFICATION_TYPE_SUCCESS",
    "NOTIFICATION_TYPE_WARNING",
    "NOTIFICATION_TYPE_ERROR",
    "NOTIFICATION_TYPES",
    "DELIVERY_STATUS_PENDING",
    "DELIVERY_STATUS_SENDING",
    "DELIVERY_STATUS_DELIVERED",
    "DELIVERY_STATUS_FAILED",
    "DELIVERY_STATUS_PENDING_HTTP",
    "DELIVERY_STATUSES",
    "DELIVERY_CHANNEL_WEBSOCKET",
    "DELIVERY_CHANNEL_HTTP",
    "DELIVERY_CHANNEL_ALL",
    "DELIVERY_CHANNELS",
    "RelatedEntity",
    "Notification",
    "NotificationTemplate",
    "NotificationPage",
    "NotificationCounts",
    "FanOutItem",
    "FanOutResult",
]
