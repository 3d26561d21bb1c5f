"""Helpers to broadcast realtime events to connected clients."""

from __future__ import annotations

import asyncio
import copy
import logging
from typing import Any

from anyio import from_thread

from .manager import NotificationConnectionManager, notification_manager

logger = logging.getLogger(__name__)

READ_EVENT = "notification:read"
DELETED_EVENT = "notification:deleted"


class RealtimeEventPublisher:
    """Dispatch structured realtime events to websocket subscribers."""

    def __init__(self, manager: NotificationConnectionManager) -> None:
        self._manager = manager

    def dispatch(self, user_id: int, *, event_type: str, payload: Any) -> None:
        """Schedule a realtime ``event_type`` event for ``user_id``."""

        if not user_id or not self._manager.is_connected(user_id):
            return

        message = {"type": event_type, "data": copy.deepcopy(payload)}
        self._schedule_send(user_id, message)

    def _schedule_send(self, user_id: int, message: dict[str, Any]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            try:
                from_thread.run(self._manager.send_to_user, user_id, message)
            except RuntimeError:
                # Not inside an AnyIO worker thread, nothing can reach the loop.
                logger.warning(
                    "Could not push %s event to user %s", message["type"], user_id
                )
        else:
            self._manager.schedule_send(loop, user_id, message)


realtime_event_publisher = RealtimeEventPublisher(notification_manager)


def dispatch_realtime_event(user_id: int, *, event_type: str, payload: Any) -> None:
    """Public helper to push a realtime event to ``user_id``."""

    realtime_event_publisher.dispatch(user_id, event_type=event_type, payload=payload)


__all__ = [
    "READ_EVENT",
    "DELETED_EVENT",
    "RealtimeEventPublisher",
    "realtime_event_publisher",
    "dispatch_realtime_event",
]
