from __future__ import annotations

import asyncio

import pytest

from app.infrastructure.notifications import NotificationConnectionManager


class _FakeSocket:
    def __init__(self, *, broken: bool = False) -> None:
        self.broken = broken
        self.accepted = False
        self.sent: list[dict] = []

    async def accept(self) -> None:
        self.accepted = True

    async def send_json(self, message: dict) -> None:
        if self.broken:
            raise RuntimeError("socket closed")
        self.sent.append(message)


@pytest.mark.anyio
async def test_send_reaches_every_socket_and_drops_broken_ones() -> None:
    manager = NotificationConnectionManager()
    healthy, broken, other_user = _FakeSocket(), _FakeSocket(broken=True), _FakeSocket()
    await manager.connect(1, healthy)
    await manager.connect(1, broken)
    await manager.connect(2, other_user)

    delivered = await manager.send_to_user(1, {"type": "notification:new", "data": {}})

    assert delivered == 1
    assert healthy.accepted
    assert healthy.sent == [{"type": "notification:new", "data": {}}]
    assert other_user.sent == []
    assert manager.is_connected(1)

    manager.disconnect(1, healthy)
    assert not manager.is_connected(1)
    assert await manager.send_to_user(1, {"type": "ping"}) == 0


@pytest.mark.anyio
async def test_scheduled_send_is_held_until_it_finishes() -> None:
    manager = NotificationConnectionManager()
    socket = _FakeSocket()
    await manager.connect(5, socket)

    task = manager.schedule_send(asyncio.get_running_loop(), 5, {"type": "notification:read"})

    assert task in manager._pending
    assert await task == 1
    await asyncio.sleep(0)
    assert task not in manager._pending
    assert socket.sent == [{"type": "notification:read"}]
