"""Realtime delivery bookkeeping and the HTTP polling fallback."""

from __future__ import annotations

import dataclasses
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.entities import (
    DELIVERY_CHANNEL_HTTP,
    DELIVERY_STATUS_DELIVERED,
    DELIVERY_STATUS_FAILED,
    DELIVERY_STATUS_PENDING,
    DELIVERY_STATUS_PENDING_HTTP,
    DELIVERY_STATUS_SENDING,
    DELIVERY_STATUSES,
    Notification,
    NotificationPage,
)
from app.infrastructure.notifications import notification_publisher
from app.infrastructure.repositories import NotificationRepository

from .errors import NotificationNotFoundError
from .pagination import resolve_page

logger = logging.getLogger(__name__)

POLL_BATCH_SIZE = 50
_RETRYABLE_STATUSES = (DELIVERY_STATUS_FAILED, DELIVERY_STATUS_PENDING_HTTP)
_POLLABLE_STATUSES = (DELIVERY_STATUS_PENDING, DELIVERY_STATUS_PENDING_HTTP)


def deliver_notification(session: Session, notification: Notification) -> Notification:
    """Push ``notification`` over the websocket channel when possible.

    Users without a live socket get ``pending_http`` so the next poll picks
    the notification up. Notifications created for the ``http`` channel are
    left ``pending``. Bookkeeping failures are logged and never raised.
    """

    if notification.id is None or notification.delivery_channel == DELIVERY_CHANNEL_HTTP:
        return notification

    repository = NotificationRepository(session)
    attempts = notification.delivery_attempts + 1
    try:
        if not notification_publisher.can_deliver(notification.user_id):
            logger.debug(
                "No websocket for user %s, notification %s queued for polling",
                notification.user_id,
                notification.id,
            )
            return _record(repository, notification, DELIVERY_STATUS_PENDING_HTTP, attempts)

        sending = _record(repository, notification, DELIVERY_STATUS_SENDING, attempts)
        try:
            notification_publisher.dispatch(sending)
        except RuntimeError:
            logger.warning(
                "Failed to push notification %s to user %s",
                notification.id,
                notification.user_id,
                exc_info=True,
            )
            return _record(repository, sending, DELIVERY_STATUS_FAILED, None)
        return _record(repository, sending, DELIVERY_STATUS_DELIVERED, None)
    except SQLAlchemyError:
        session.rollback()
        logger.exception(
            "Error updating delivery status for notification %s", notification.id
        )
        return notification


def poll_notifications(session: Session, *, user_id: int) -> list[Notification]:
    """Return undelivered unread notifications and mark them delivered."""

    repository = NotificationRepository(session)
    pending = list(
        repository.list_pending_delivery(
            user_id, statuses=_POLLABLE_STATUSES, limit=POLL_BATCH_SIZE
        )
    )
    if not pending:
        return []
    repository.set_delivery_status(
        [notification.id for notification in pending], status=DELIVERY_STATUS_DELIVERED
    )
    return [
        dataclasses.replace(notification, delivery_status=DELIVERY_STATUS_DELIVERED)
        for notification in pending
    ]


def list_by_delivery_status(
    session: Session,
    *,
    user_id: int,
    status: str,
    limit: int | None = None,
    offset: int = 0,
) -> NotificationPage:
    _ensure_valid_status(status)
    limit, offset = resolve_page(limit, offset)
    repository = NotificationRepository(session)
    items = list(
        repository.list_for_user(
            user_id, delivery_status=status, limit=limit, offset=offset
        )
    )
    total = repository.count_for_user(user_id, delivery_status=status)
    unread = repository.count_for_user(user_id, unread_only=True)
    return NotificationPage(items=items, total=total, unread=unread)


def update_delivery_status(
    session: Session, *, user_id: int, notification_id: int, status: str
) -> Notification:
    _ensure_valid_status(status)
    updated = NotificationRepository(session).update_delivery(
        notification_id, status=status, user_id=user_id
    )
    if updated is None:
        raise NotificationNotFoundError()
    return updated


def retry_delivery(session: Session, *, user_id: int, notification_id: int) -> Notification:
    """Attempt delivery again for a ``failed`` or ``pending_http`` notification."""

    notification = NotificationRepository(session).get_for_user(
        notification_id, user_id=user_id
    )
    if notification is None:
        raise NotificationNotFoundError()
    if notification.delivery_status not in _RETRYABLE_STATUSES:
        raise ValueError(
            'Can only retry delivery for notifications with status "failed" or "pending_http"'
        )
    return deliver_notification(session, notification)


def _record(
    repository: NotificationRepository,
    notification: Notification,
    status: str,
    attempts: int | None,
) -> Notification:
    updated = repository.update_delivery(notification.id, status=status, attempts=attempts)
    return updated or notification


def _ensure_valid_status(status: str) -> None:
    if status not in DELIVERY_STATUSES:
        raise ValueError(
            f"Invalid status. Must be one of: {', '.join(DELIVERY_STATUSES)}"
        )


__all__ = [
    "POLL_BATCH_SIZE",
    "deliver_notification",
    "poll_notifications",
    "list_by_delivery_status",
    "update_delivery_status",
    "retry_delivery",
]
