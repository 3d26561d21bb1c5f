"""Websocket handshake, keepalive and acknowledgement flow."""

from __future__ import annotations

import asyncio

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from app.application.use_cases.notifications import count_notifications, create_notification
from app.infrastructure.notifications import notification_manager
from app.infrastructure.security import create_access_token
from app.interfaces.api.routes import notifications as notification_routes


def _ws_url(user_id: int) -> str:
    return f"/api/notifications/ws?token={create_access_token({'sub': str(user_id)})}"


def test_socket_requires_valid_token(client: TestClient) -> None:
    with pytest.raises(WebSocketDisconnect) as missing:
        with client.websocket_connect("/api/notifications/ws"):
            pass
    with pytest.raises(WebSocketDisconnect) as invalid:
        with client.websocket_connect("/api/notifications/ws?token=garbage"):
            pass

    assert missing.value.code == 1008
    assert invalid.value.code == 1008


def test_init_ping_and_ack(client: TestClient, db_session) -> None:
    notification = create_notification(
        db_session, user_id=4, title="Welcome", message="Thanks for joining"
    )

    with client.websocket_connect(_ws_url(4)) as websocket:
        init = websocket.receive_json()
        assert init["type"] == "init"
        assert [item["id"] for item in init["data"]] == [notification.id]
        assert notification_manager.is_connected(4)

        websocket.send_json({"type": "ping"})
        assert websocket.receive_json() == {"type": "pong"}

        websocket.send_json({"type": "ack", "ids": [notification.id, "bogus"]})
        assert websocket.receive_json() == {
            "type": "notification:read",
            "data": {"ids": [notification.id]},
        }

    db_session.expire_all()
    assert count_notifications(db_session, user_id=4).unread == 0


def test_socket_database_work_runs_off_the_event_loop(client: TestClient, db_session, monkeypatch) -> None:
    notification = create_notification(db_session, user_id=8, title="Hi", message="Hello")
    on_loop = []

    def _tracking(helper):
        def _wrapper(*args):
            try:
                asyncio.get_running_loop()
            except RuntimeError:
                on_loop.append(False)
            else:
                on_loop.append(True)
            return helper(*args)

        return _wrapper

    monkeypatch.setattr(notification_routes, "_load_unread", _tracking(notification_routes._load_unread))
    monkeypatch.setattr(notification_routes, "_acknowledge", _tracking(notification_routes._acknowledge))

    with client.websocket_connect(_ws_url(8)) as websocket:
        assert websocket.receive_json()["type"] == "init"
        websocket.send_json({"type": "ack", "ids": [notification.id]})
        assert websocket.receive_json()["type"] == "notification:read"

    assert on_loop == [False, False]
