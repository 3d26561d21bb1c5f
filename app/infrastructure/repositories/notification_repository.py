"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Iterable

from sqlalchemy import delete, func, update
from sqlalchemy.orm import Session

from app.domain.entities import Notification, RelatedEntity
from app.infrastructure.models import NotificationModel
from app.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_naive_datetime,
)


class NotificationRepository:
    """Provide CRUD operations for :class:`Notification` objects.

    Every read and write is filtered on the owning ``user_id`` except the
    delivery bookkeeping helpers, which address rows by primary key.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_for_user(
        self,
        user_id: int,
        *,
        unread_only: bool = False,
        delivery_status: str | None = None,
        limit: int | None = 20,
        offset: int = 0,
    ) -> Sequence[Notification]:
        query = self._owned_query(
            user_id, unread_only=unread_only, delivery_status=delivery_status
        )
        query = query.order_by(
            NotificationModel.created_at.desc(), NotificationModel.id.desc()
        )
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def count_for_user(
        self,
        user_id: int,
        *,
        unread_only: bool = False,
        delivery_status: str | None = None,
    ) -> int:
        query = self._owned_query(
            user_id, unread_only=unread_only, delivery_status=delivery_status
        )
        return query.with_entities(func.count(NotificationModel.id)).scalar() or 0

    def count_by_delivery_status(self, user_id: int) -> dict[str, int]:
        rows = (
            self.session.query(
                NotificationModel.delivery_status, func.count(NotificationModel.id)
            )
            .filter(NotificationModel.user_id == user_id)
            .group_by(NotificationModel.delivery_status)
            .all()
        )
        return {status: int(count) for status, count in rows}

    def get_for_user(self, notification_id: int, *, user_id: int) -> Notification | None:
        model = self._get_owned_model(notification_id, user_id=user_id)
        return self._to_entity(model) if model else None

    def list_pending_delivery(
        self, user_id: int, *, statuses: Iterable[str], limit: int = 50
    ) -> Sequence[Notification]:
        query = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.user_id == user_id)
            .filter(NotificationModel.is_read.is_(False))
            .filter(NotificationModel.delivery_status.in_(list(statuses)))
            .order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())
            .limit(limit)
        )
        return [self._to_entity(model) for model in query.all()]

    def create(self, notification: Notification) -> Notification:
        model = NotificationModel()
        self._apply_entity_to_model(model, notification)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def mark_as_read(
        self, notification_ids: Iterable[int] | None, *, user_id: int
    ) -> list[int]:
        """Flag unread notifications of ``user_id`` as read.

        ``None`` targets every unread notification of the user. A single
        ``UPDATE ... RETURNING`` reports only the rows this call changed.
        """

        statement = update(NotificationModel).where(
            NotificationModel.user_id == user_id,
            NotificationModel.is_read.is_(False),
        )
        if notification_ids is not None:
            ids = _clean_ids(notification_ids)
            if not ids:
                return []
            statement = statement.where(NotificationModel.id.in_(ids))

        statement = (
            statement.values(is_read=True, updated_at=now_in_app_naive_datetime())
            .returning(NotificationModel.id)
            .execution_options(synchronize_session=False)
        )
        updated_ids = list(self.session.execute(statement).scalars())
        self.session.commit()
        return sorted(updated_ids)

    def delete(self, notification_ids: Iterable[int], *, user_id: int) -> list[int]:
        ids = _clean_ids(notification_ids)
        if not ids:
            return []
        statement = (
            delete(NotificationModel)
            .where(
                NotificationModel.id.in_(ids),
                NotificationModel.user_id == user_id,
            )
            .returning(NotificationModel.id)
            .execution_options(synchronize_session=False)
        )
        deleted_ids = list(self.session.execute(statement).scalars())
        self.session.commit()
        return sorted(deleted_ids)

    def update_delivery(
        self,
        notification_id: int,
        *,
        status: str,
        attempts: int | None = None,
        user_id: int | None = None,
    ) -> Notification | None:
        """Record a delivery attempt outcome for one notification."""

        if user_id is None:
            model = self.session.get(NotificationModel, notification_id)
        else:
            model = self._get_owned_model(notification_id, user_id=user_id)
        if model is None:
            return None

        now = now_in_app_naive_datetime()
        model.delivery_status = status
        if attempts is not None:
            model.delivery_attempts = attempts
            model.last_delivery_attempt = now
        model.updated_at = now
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def set_delivery_status(self, notification_ids: Iterable[int], *, status: str) -> None:
        ids = _clean_ids(notification_ids)
        if not ids:
            return
        self.session.query(NotificationModel).filter(
            NotificationModel.id.in_(ids)
        ).update(
            {
                NotificationModel.delivery_status: status,
                NotificationModel.updated_at: now_in_app_naive_datetime(),
            },
            synchronize_session=False,
        )
        self.session.commit()

    def _owned_query(
        self,
        user_id: int,
        *,
        unread_only: bool = False,
        delivery_status: str | None = None,
    ):
        query = self.session.query(NotificationModel).filter(
            NotificationModel.user_id == user_id
        )
        if unread_only:
            query = query.filter(NotificationModel.is_read.is_(False))
        if delivery_status:
            query = query.filter(NotificationModel.delivery_status == delivery_status)
        return query

    def _get_owned_model(
        self, notification_id: int, *, user_id: int
    ) -> NotificationModel | None:
        return (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.id == notification_id,
                NotificationModel.user_id == user_id,
            )
            .one_or_none()
        )

    @staticmethod
    def _apply_entity_to_model(model: NotificationModel, notification: Notification) -> None:
        now = now_in_app_naive_datetime()
        model.user_id = notification.user_id
        model.title = notification.title
        model.message = notification.message
        model.type = notification.type
        model.related_to = notification.related.kind if notification.related else None
        model.related_id = notification.related.id if notification.related else None
        model.is_read = notification.is_read
        model.actions = notification.actions
        model.created_at = ensure_app_naive_datetime(notification.created_at) or now
        model.updated_at = ensure_app_naive_datetime(notification.updated_at) or now
        model.expires_at = ensure_app_naive_datetime(notification.expires_at)
        model.delivery_status = notification.delivery_status
        model.delivery_channel = notification.delivery_channel
        model.delivery_attempts = notification.delivery_attempts
        model.last_delivery_attempt = ensure_app_naive_datetime(
            notification.last_delivery_attempt
        )

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        related = None
        if model.related_to is not None and model.related_id is not None:
            related = RelatedEntity(kind=model.related_to, id=model.related_id)
        return Notification(
            id=model.id,
            user_id=model.user_id,
            title=model.title,
            message=model.message,
            type=model.type,
            related=related,
            is_read=bool(model.is_read),
            actions=model.actions,
            created_at=ensure_app_timezone(model.created_at),
            updated_at=ensure_app_timezone(model.updated_at),
            expires_at=ensure_app_timezone(model.expires_at),
            delivery_status=model.delivery_status,
            delivery_channel=model.delivery_channel,
            delivery_attempts=model.delivery_attempts or 0,
            last_delivery_attempt=ensure_app_timezone(model.last_delivery_attempt),
        )


def _clean_ids(notification_ids: Iterable[int]) -> list[int]:
    unique: list[int] = []
    for notification_id in notification_ids:
        if notification_id is None or notification_id in unique:
            continue
        unique.append(notification_id)
    return unique


__all__ = ["NotificationRepository"]
