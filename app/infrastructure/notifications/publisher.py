"""Utility helpers to push notifications to websocket subscribers."""

from __future__ import annotations

import asyncio
from typing import Any

from anyio import from_thread

from app.domain.entities import Notification

from .manager import NotificationConnectionManager, notification_manager

NEW_NOTIFICATION_EVENT = "notification:new"


class NotificationPublisher:
    """Serialize notifications and schedule their delivery."""

    def __init__(self, manager: NotificationConnectionManager) -> None:
        self._manager = manager

    def can_deliver(self, user_id: int) -> bool:
        """Return whether a push to ``user_id`` would reach a live socket."""

        return self._manager.is_connected(user_id)

    def dispatch(self, notification: Notification) -> None:
        """Deliver ``notification`` to its user's sockets.

        From a worker thread the push is awaited and ``RuntimeError`` is
        raised when no socket received it. Inside the event loop the push is
        only scheduled.
        """

        message = {"type": NEW_NOTIFICATION_EVENT, "data": self._serialize(notification)}
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            delivered = from_thread.run(
                self._manager.send_to_user, notification.user_id, message
            )
            if not delivered:
                raise RuntimeError(
                    f"Notification {notification.id} reached no websocket of user {notification.user_id}"
                )
        else:
            self._manager.schedule_send(loop, notification.user_id, message)

    @staticmethod
    def _serialize(notification: Notification) -> dict[str, Any]:
        return {
            "id": notification.id,
            "user_id": notification.user_id,
            "title": notification.title,
            "message": notification.message,
            "type": notification.type,
            "related_to": notification.related.kind if notification.related else None,
            "related_id": notification.related.id if notification.related else None,
            "is_read": notification.is_read,
            "actions": notification.actions,
            "created_at": _iso_or_none(notification.created_at),
            "updated_at": _iso_or_none(notification.updated_at),
            "expires_at": _iso_or_none(notification.expires_at),
            "delivery_status": notification.delivery_status,
        }


def _iso_or_none(value) -> str | None:
    return value.isoformat() if value else None


notification_publisher = NotificationPublisher(notification_manager)


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the websocket payload representation for ``notification``."""

    return NotificationPublisher._serialize(notification)


__all__ = [
    "NEW_NOTIFICATION_EVENT",
    "NotificationPublisher",
    "notification_publisher",
    "serialize_notification",
]
