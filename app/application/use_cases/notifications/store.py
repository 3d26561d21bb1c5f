"""Use cases for storing and querying a user's notifications."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.entities import (
    DELIVERY_CHANNEL_ALL,
    DELIVERY_CHANNELS,
    NOTIFICATION_TYPE_INFO,
    NOTIFICATION_TYPES,
    FanOutItem,
    FanOutResult,
    Notification,
    NotificationCounts,
    NotificationPage,
    NotificationTemplate,
    RelatedEntity,
)
from app.infrastructure.notifications import (
    DELETED_EVENT,
    READ_EVENT,
    dispatch_realtime_event,
)
from app.infrastructure.repositories import NotificationRepository
from app.utils import now_in_app_timezone

from .delivery import deliver_notification
from .errors import NotificationNotFoundError
from .pagination import resolve_page

logger = logging.getLogger(__name__)


def list_notifications(
    session: Session,
    *,
    user_id: int,
    unread_only: bool = False,
    limit: int | None = None,
    offset: int = 0,
    delivery_status: str | None = None,
) -> NotificationPage:
    """Return a newest-first page of ``user_id``'s notifications.

    ``total`` counts the filtered set and ``unread`` every unread notification
    of the user. Both are separate queries, so under concurrent writes they can
    drift slightly from the returned page.
    """

    limit, offset = resolve_page(limit, offset)
    repository = NotificationRepository(session)
    items = list(
        repository.list_for_user(
            user_id,
            unread_only=unread_only,
            delivery_status=delivery_status,
            limit=limit,
            offset=offset,
        )
    )
    total = repository.count_for_user(
        user_id, unread_only=unread_only, delivery_status=delivery_status
    )
    unread = repository.count_for_user(user_id, unread_only=True)
    return NotificationPage(items=items, total=total, unread=unread)


def count_notifications(session: Session, *, user_id: int) -> NotificationCounts:
    repository = NotificationRepository(session)
    return NotificationCounts(
        total=repository.count_for_user(user_id),
        unread=repository.count_for_user(user_id, unread_only=True),
        by_status=repository.count_by_delivery_status(user_id),
    )


def get_notification(session: Session, *, user_id: int, notification_id: int) -> Notification:
    """Return the notification or raise :class:`NotificationNotFoundError`."""

    notification = NotificationRepository(session).get_for_user(
        notification_id, user_id=user_id
    )
    if notification is None:
        raise NotificationNotFoundError()
    return notification


def mark_notifications_read(
    session: Session,
    *,
    user_id: int,
    ids: Iterable[int] | None = None,
    all: bool = False,
) -> list[int]:
    """Mark notifications read, either every unread one (``all``) or by id.

    Returns the ids that changed; already-read or foreign ids are ignored.
    """

    id_list = list(ids or [])
    if not all and not id_list:
        raise ValueError("Either provide notification IDs or set all=true")

    repository = NotificationRepository(session)
    updated_ids = repository.mark_as_read(None if all else id_list, user_id=user_id)
    if updated_ids:
        dispatch_realtime_event(user_id, event_type=READ_EVENT, payload={"ids": updated_ids})
    return updated_ids


def delete_notifications(session: Session, *, user_id: int, ids: Iterable[int] | None) -> list[int]:
    id_list = list(ids or [])
    if not id_list:
        raise ValueError("Please provide notification IDs to delete")

    deleted_ids = NotificationRepository(session).delete(id_list, user_id=user_id)
    if deleted_ids:
        dispatch_realtime_event(
            user_id, event_type=DELETED_EVENT, payload={"ids": deleted_ids}
        )
    return deleted_ids


def create_notification(
    session: Session,
    *,
    user_id: int | None,
    title: str | None,
    message: str | None,
    type: str = NOTIFICATION_TYPE_INFO,
    related: RelatedEntity | None = None,
    actions: Mapping[str, Mapping[str, str]] | None = None,
    expires_at: datetime | None = None,
    delivery_channel: str = DELIVERY_CHANNEL_ALL,
) -> Notification | None:
    """Persist a notification and hand it to realtime delivery.

    Invalid input or a persistence error is logged and yields ``None`` so the
    domain action that triggered the notification is never interrupted.
    """

    if not user_id or not title or not message:
        logger.error("Missing required fields for notification (user_id, title, message)")
        return None
    if type not in NOTIFICATION_TYPES:
        logger.error("Unknown notification type %r for user %s", type, user_id)
        return None
    if delivery_channel not in DELIVERY_CHANNELS:
        logger.error("Unknown delivery channel %r for user %s", delivery_channel, user_id)
        return None

    now = now_in_app_timezone()
    notification = Notification(
        id=None,
        user_id=user_id,
        title=title,
        message=message,
        type=type,
        related=related,
        actions={name: dict(action) for name, action in actions.items()} if actions else None,
        created_at=now,
        updated_at=now,
        expires_at=expires_at,
        delivery_channel=delivery_channel,
    )
    try:
        saved = NotificationRepository(session).create(notification)
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Error creating notification for user %s", user_id)
        return None

    return deliver_notification(session, saved)


def create_notifications_for_users(
    session: Session,
    user_ids: Iterable[int],
    template: NotificationTemplate,
    *,
    delivery_channel: str = DELIVERY_CHANNEL_ALL,
) -> FanOutResult:
    """Create one independent notification per user.

    A failed creation is logged and recorded in the result; the remaining
    users are still processed and nothing is rolled back or retried.
    """

    result = FanOutResult()
    for user_id in user_ids:
        notification = create_notification(
            session,
            user_id=user_id,
            title=template.title,
            message=template.message,
            type=template.type,
            related=template.related,
            actions=template.actions,
            expires_at=template.expires_at,
            delivery_channel=delivery_channel,
        )
        if notification is None:
            logger.warning("Skipping notification fan-out for user %s", user_id)
            result.items.append(
                FanOutItem(user_id=user_id, error="Notification could not be created")
            )
            continue
        result.items.append(FanOutItem(user_id=user_id, notification=notification))
    return result


__all__ = [
    "list_notifications",
    "count_notifications",
    "get_notification",
    "mark_notifications_read",
    "delete_notifications",
    "create_notification",
    "create_notifications_for_users",
]
