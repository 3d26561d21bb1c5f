"""Tests for the notification store use cases."""

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import event
from sqlalchemy.exc import OperationalError

from app.application.use_cases.notifications import (
    NotificationNotFoundError,
    count_notifications,
    create_notification,
    create_notifications_for_users,
    delete_notifications,
    get_notification,
    list_notifications,
    mark_notifications_read,
)
from app.config import reset_settings_cache
from app.domain.entities import NotificationTemplate, RelatedEntity
from app.infrastructure import database
from app.infrastructure.models import NotificationModel
from app.infrastructure.repositories import NotificationRepository


def _create(session, user_id: int, title: str = "Hello", **kwargs):
    notification = create_notification(
        session, user_id=user_id, title=title, message=f"{title} message", **kwargs
    )
    assert notification is not None
    return notification


def test_create_applies_defaults(db_session) -> None:
    notification = _create(db_session, 1)

    assert notification.id is not None
    assert notification.type == "info"
    assert notification.is_read is False
    assert notification.related is None
    assert notification.actions is None
    assert notification.expires_at is None
    assert notification.created_at is not None
    assert notification.updated_at is not None


def test_create_keeps_soft_reference_and_actions(db_session) -> None:
    notification = _create(
        db_session,
        1,
        type="warning",
        related=RelatedEntity(kind="bid", id=999),
        actions={"view": {"label": "View Details", "url": "/bids/999"}},
    )

    stored = get_notification(db_session, user_id=1, notification_id=notification.id)
    assert stored.type == "warning"
    assert stored.related == RelatedEntity(kind="bid", id=999)
    assert stored.actions == {"view": {"label": "View Details", "url": "/bids/999"}}


@pytest.mark.parametrize(
    ("user_id", "title", "message"),
    [(None, "Title", "Message"), (1, "", "Message"), (1, "Title", None)],
)
def test_create_without_required_fields_returns_none(db_session, user_id, title, message) -> None:
    assert create_notification(db_session, user_id=user_id, title=title, message=message) is None
    assert db_session.query(NotificationModel).count() == 0


def test_create_rejects_unknown_type(db_session) -> None:
    assert create_notification(db_session, user_id=1, title="t", message="m", type="urgent") is None


def test_list_is_newest_first_and_paginated(db_session) -> None:
    created = [_create(db_session, 1, title=f"n{index}") for index in range(5)]
    # Spread the timestamps so ordering does not rely on the id tie-breaker.
    base = created[0].created_at.replace(tzinfo=None)
    for offset, notification in enumerate(created):
        db_session.query(NotificationModel).filter(NotificationModel.id == notification.id).update(
            {NotificationModel.created_at: base + timedelta(minutes=offset)}
        )
    db_session.commit()

    page = list_notifications(db_session, user_id=1, limit=2, offset=1)

    assert [item.title for item in page.items] == ["n3", "n2"]
    assert page.total == 5
    assert page.unread == 5


@pytest.mark.parametrize(("limit", "offset", "expected"), [(20, 0, 4), (3, 2, 2), (10, 4, 0), (0, 0, 0)])
def test_page_size_matches_remaining_items(db_session, limit, offset, expected) -> None:
    for index in range(4):
        _create(db_session, 1, title=f"n{index}")

    page = list_notifications(db_session, user_id=1, limit=limit, offset=offset)

    assert len(page.items) == expected


def test_limit_is_clamped_to_configured_maximum(db_session, monkeypatch) -> None:
    monkeypatch.setenv("NOTIFICATIONS_MAX_PAGE_SIZE", "2")
    reset_settings_cache()
    for index in range(3):
        _create(db_session, 1, title=f"n{index}")

    page = list_notifications(db_session, user_id=1, limit=1000)

    assert len(page.items) == 2
    assert page.total == 3


def test_negative_offset_is_rejected(db_session) -> None:
    with pytest.raises(ValueError):
        list_notifications(db_session, user_id=1, offset=-1)


def test_unread_only_filters_page_and_total(db_session) -> None:
    first = _create(db_session, 1, title="first")
    _create(db_session, 1, title="second")
    mark_notifications_read(db_session, user_id=1, ids=[first.id])

    page = list_notifications(db_session, user_id=1, unread_only=True)

    assert [item.title for item in page.items] == ["second"]
    assert page.total == 1
    assert page.unread == 1


def test_other_users_notifications_are_invisible(db_session) -> None:
    foreign = _create(db_session, 2, title="theirs")
    _create(db_session, 1, title="mine")

    assert [item.title for item in list_notifications(db_session, user_id=1).items] == ["mine"]
    assert count_notifications(db_session, user_id=1).total == 1
    with pytest.raises(NotificationNotFoundError):
        get_notification(db_session, user_id=1, notification_id=foreign.id)
    assert mark_notifications_read(db_session, user_id=1, ids=[foreign.id]) == []
    assert delete_notifications(db_session, user_id=1, ids=[foreign.id]) == []
    assert get_notification(db_session, user_id=2, notification_id=foreign.id).is_read is False


def test_missing_and_foreign_ids_raise_the_same_error(db_session) -> None:
    foreign = _create(db_session, 2)

    with pytest.raises(NotificationNotFoundError) as missing:
        get_notification(db_session, user_id=1, notification_id=12345)
    with pytest.raises(NotificationNotFoundError) as not_owned:
        get_notification(db_session, user_id=1, notification_id=foreign.id)

    assert str(missing.value) == str(not_owned.value)


def test_mark_read_requires_ids_or_all(db_session) -> None:
    with pytest.raises(ValueError):
        mark_notifications_read(db_session, user_id=1)
    with pytest.raises(ValueError):
        mark_notifications_read(db_session, user_id=1, ids=[])


def test_mark_read_twice_is_a_no_op(db_session) -> None:
    notification = _create(db_session, 1)

    assert mark_notifications_read(db_session, user_id=1, ids=[notification.id]) == [notification.id]
    first_read = get_notification(db_session, user_id=1, notification_id=notification.id)

    assert mark_notifications_read(db_session, user_id=1, ids=[notification.id]) == []
    second_read = get_notification(db_session, user_id=1, notification_id=notification.id)

    assert second_read.is_read is True
    assert second_read.updated_at == first_read.updated_at


def test_mark_all_leaves_nothing_unread(db_session) -> None:
    ids = [_create(db_session, 1, title=f"n{index}").id for index in range(3)]
    other = _create(db_session, 2)

    updated = mark_notifications_read(db_session, user_id=1, all=True)

    assert sorted(updated) == sorted(ids)
    assert count_notifications(db_session, user_id=1).unread == 0
    assert count_notifications(db_session, user_id=2).unread == 1
    assert get_notification(db_session, user_id=2, notification_id=other.id).is_read is False


def test_delete_removes_only_owned_rows(db_session) -> None:
    mine = [_create(db_session, 1, title=f"n{index}").id for index in range(3)]
    theirs = _create(db_session, 2).id
    before = count_notifications(db_session, user_id=1).total

    deleted = delete_notifications(db_session, user_id=1, ids=[mine[0], theirs])

    assert deleted == [mine[0]]
    assert count_notifications(db_session, user_id=1).total == before - 1
    with pytest.raises(NotificationNotFoundError):
        get_notification(db_session, user_id=1, notification_id=mine[0])
    assert get_notification(db_session, user_id=2, notification_id=theirs).id == theirs


def test_delete_requires_ids(db_session) -> None:
    with pytest.raises(ValueError):
        delete_notifications(db_session, user_id=1, ids=[])
    with pytest.raises(ValueError):
        delete_notifications(db_session, user_id=1, ids=None)


def test_count_groups_by_delivery_status(db_session) -> None:
    _create(db_session, 1)
    _create(db_session, 1, delivery_channel="http")

    counts = count_notifications(db_session, user_id=1)

    assert counts.total == 2
    assert counts.unread == 2
    assert counts.by_status == {"pending_http": 1, "pending": 1}


def test_fan_out_skips_failed_recipient(db_session, monkeypatch) -> None:
    original_create = NotificationRepository.create

    def flaky_create(self, notification):
        if notification.user_id == 2:
            raise OperationalError("INSERT INTO notifications", {}, Exception("disk full"))
        return original_create(self, notification)

    monkeypatch.setattr(NotificationRepository, "create", flaky_create)

    result = create_notifications_for_users(
        db_session,
        [1, 2, 3],
        NotificationTemplate(title="Maintenance", message="Scheduled downtime tonight"),
    )

    assert [notification.user_id for notification in result.created] == [1, 3]
    assert result.failed_user_ids == [2]
    assert [item.succeeded for item in result.items] == [True, False, True]
    assert db_session.query(NotificationModel).count() == 2


def _race_before(session, *, kind: str, competitor) -> None:
    """Run ``competitor`` once, right before ``session`` issues its bulk ``kind``."""

    pending = [competitor]

    @event.listens_for(session, "do_orm_execute")
    def _interleave(orm_execute_state) -> None:
        flag = orm_execute_state.is_update if kind == "update" else orm_execute_state.is_delete
        if flag and pending:
            pending.pop()()


def test_concurrent_mark_read_reports_each_id_once(db_session) -> None:
    notification = _create(db_session, 1)
    other_session = database.SessionLocal()
    try:
        _race_before(
            db_session,
            kind="update",
            competitor=lambda: mark_notifications_read(
                other_session, user_id=1, ids=[notification.id]
            ),
        )

        assert mark_notifications_read(db_session, user_id=1, ids=[notification.id]) == []
    finally:
        other_session.close()

    assert get_notification(db_session, user_id=1, notification_id=notification.id).is_read is True


def test_concurrent_delete_reports_each_id_once(db_session) -> None:
    notification = _create(db_session, 1)
    other_session = database.SessionLocal()
    try:
        _race_before(
            db_session,
            kind="delete",
            competitor=lambda: delete_notifications(
                other_session, user_id=1, ids=[notification.id]
            ),
        )

        assert delete_notifications(db_session, user_id=1, ids=[notification.id]) == []
    finally:
        other_session.close()

    assert count_notifications(db_session, user_id=1).total == 0
