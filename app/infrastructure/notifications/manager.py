"""Connection management helpers for notification websockets."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Any, DefaultDict, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class NotificationConnectionManager:
    """Manage active websocket connections grouped by user."""

    def __init__(self) -> None:
        self._connections: DefaultDict[int, Set[WebSocket]] = defaultdict(set)
        self._pending: Set[asyncio.Task] = set()

    async def connect(self, user_id: int, websocket: WebSocket) -> None:
        """Accept the websocket connection and register it for ``user_id``."""

        await websocket.accept()
        self._connections[user_id].add(websocket)
        logger.info("User %s connected to notifications websocket", user_id)

    def disconnect(self, user_id: int, websocket: WebSocket) -> None:
        """Remove ``websocket`` from the pool for ``user_id``."""

        connections = self._connections.get(user_id)
        if connections is None:
            return
        connections.discard(websocket)
        if not connections:
            self._connections.pop(user_id, None)
        logger.info("User %s disconnected from notifications websocket", user_id)

    def is_connected(self, user_id: int) -> bool:
        """Return whether ``user_id`` has at least one live websocket."""

        return bool(self._connections.get(user_id))

    async def send_to_user(self, user_id: int, message: dict[str, Any]) -> int:
        """Send ``message`` to every socket of ``user_id``.

        Sockets that fail to send are dropped. Returns how many received it.
        """

        delivered = 0
        for connection in list(self._connections.get(user_id, set())):
            try:
                await connection.send_json(message)
            except Exception:  # pragma: no cover
                logger.warning("Dropping broken websocket for user %s", user_id, exc_info=True)
                self.disconnect(user_id, connection)
            else:
                delivered += 1
        return delivered

    def schedule_send(
        self, loop: asyncio.AbstractEventLoop, user_id: int, message: dict[str, Any]
    ) -> asyncio.Task:
        """Run :meth:`send_to_user` as a task on ``loop`` and hold it until done."""

        task = loop.create_task(self.send_to_user(user_id, message))
        self._pending.add(task)
        task.add_done_callback(self._finish_send)
        return task

    def _finish_send(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Websocket push failed", exc_info=task.exception())


notification_manager = NotificationConnectionManager()


__all__ = ["NotificationConnectionManager", "notification_manager"]
