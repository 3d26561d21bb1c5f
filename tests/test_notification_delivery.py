"""Delivery bookkeeping for websocket pushes and the polling fallback."""

from __future__ import annotations

import pytest

from app.application.use_cases.notifications import (
    NotificationNotFoundError,
    create_notification,
    get_notification,
    list_by_delivery_status,
    poll_notifications,
    retry_delivery,
    update_delivery_status,
)
from app.infrastructure.notifications import notification_publisher


@pytest.fixture()
def connected(monkeypatch):
    """Pretend every user has a live websocket and record the pushes."""

    pushed = []
    monkeypatch.setattr(notification_publisher, "can_deliver", lambda user_id: True)
    monkeypatch.setattr(notification_publisher, "dispatch", pushed.append)
    return pushed


def _create(session, user_id: int = 1, **kwargs):
    return create_notification(
        session, user_id=user_id, title="Bid accepted", message="Your bid was accepted", **kwargs
    )


def test_connected_user_gets_push(db_session, connected) -> None:
    notification = _create(db_session)

    assert notification.delivery_status == "delivered"
    assert notification.delivery_attempts == 1
    assert notification.last_delivery_attempt is not None
    assert [pushed.id for pushed in connected] == [notification.id]
    assert connected[0].delivery_status == "sending"


def test_offline_user_is_queued_for_polling(db_session) -> None:
    notification = _create(db_session)

    assert notification.delivery_status == "pending_http"
    assert notification.delivery_attempts == 1


def test_http_channel_skips_websocket(db_session, connected) -> None:
    notification = _create(db_session, delivery_channel="http")

    assert notification.delivery_status == "pending"
    assert notification.delivery_attempts == 0
    assert connected == []


def test_failed_push_is_recorded(db_session, monkeypatch) -> None:
    def broken_dispatch(notification):
        raise RuntimeError("event loop is gone")

    monkeypatch.setattr(notification_publisher, "can_deliver", lambda user_id: True)
    monkeypatch.setattr(notification_publisher, "dispatch", broken_dispatch)

    notification = _create(db_session)

    assert notification is not None
    assert notification.delivery_status == "failed"
    assert notification.delivery_attempts == 1


def test_poll_returns_undelivered_once(db_session) -> None:
    queued = _create(db_session)
    http_only = _create(db_session, delivery_channel="http")
    _create(db_session, user_id=2)

    polled = poll_notifications(db_session, user_id=1)

    assert sorted(item.id for item in polled) == sorted([queued.id, http_only.id])
    assert {item.delivery_status for item in polled} == {"delivered"}
    assert get_notification(db_session, user_id=1, notification_id=queued.id).delivery_status == "delivered"
    assert poll_notifications(db_session, user_id=1) == []


def test_list_by_delivery_status(db_session) -> None:
    _create(db_session)
    _create(db_session, delivery_channel="http")

    page = list_by_delivery_status(db_session, user_id=1, status="pending_http")

    assert page.total == 1
    assert [item.delivery_status for item in page.items] == ["pending_http"]
    with pytest.raises(ValueError):
        list_by_delivery_status(db_session, user_id=1, status="lost")


def test_update_delivery_status_checks_owner_and_value(db_session) -> None:
    notification = _create(db_session)

    updated = update_delivery_status(
        db_session, user_id=1, notification_id=notification.id, status="delivered"
    )
    assert updated.delivery_status == "delivered"

    with pytest.raises(ValueError):
        update_delivery_status(db_session, user_id=1, notification_id=notification.id, status="lost")
    with pytest.raises(NotificationNotFoundError):
        update_delivery_status(
            db_session, user_id=2, notification_id=notification.id, status="failed"
        )


def test_retry_only_for_failed_or_pending_http(db_session, monkeypatch) -> None:
    notification = _create(db_session)
    assert notification.delivery_status == "pending_http"

    pushed = []
    monkeypatch.setattr(notification_publisher, "can_deliver", lambda user_id: True)
    monkeypatch.setattr(notification_publisher, "dispatch", pushed.append)

    retried = retry_delivery(db_session, user_id=1, notification_id=notification.id)

    assert retried.delivery_status == "delivered"
    assert retried.delivery_attempts == 2
    assert len(pushed) == 1
    with pytest.raises(ValueError):
        retry_delivery(db_session, user_id=1, notification_id=notification.id)
    with pytest.raises(NotificationNotFoundError):
        retry_delivery(db_session, user_id=2, notification_id=notification.id)
