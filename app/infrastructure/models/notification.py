"""SQLAlchemy model for persisted notifications and the on-insert expiry sweep."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    event,
    update,
)
from sqlalchemy.engine import Connection
from sqlalchemy.sql import expression

from app.config import get_settings
from app.infrastructure.database import Base
from app.utils import now_in_app_naive_datetime, retention_cutoff

logger = logging.getLogger(__name__)


class NotificationModel(Base):
    """Database representation for user notifications."""

    __tablename__ = "notifications"
    __table_args__ = (
        Index("idx_notifications_related", "related_to", "related_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    # Owner id comes from the auth service; there is no local users table.
    user_id = Column(Integer, nullable=False, index=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(50), nullable=False, default="info")
    related_to = Column(String(50), nullable=True)
    related_id = Column(Integer, nullable=True)
    is_read = Column(
        Boolean,
        nullable=False,
        default=False,
        server_default=expression.false(),
        index=True,
    )
    actions = Column(JSON, nullable=True)
    created_at = Column(
        DateTime(), nullable=False, default=now_in_app_naive_datetime, index=True
    )
    updated_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)
    expires_at = Column(DateTime(), nullable=True)
    delivery_status = Column(String(50), nullable=False, default="pending", index=True)
    delivery_channel = Column(String(50), nullable=False, default="all")
    delivery_attempts = Column(Integer, nullable=False, default=0)
    last_delivery_attempt = Column(DateTime(), nullable=True)


def mark_stale_notifications_read(
    connection: Connection, *, now: datetime | None = None, retention_days: int | None = None
) -> int:
    """Mark every unread notification older than the retention window as read.

    Applies to all users in one statement. ``updated_at`` is left untouched.
    Returns the number of rows swept.
    """

    if retention_days is None:
        retention_days = get_settings().notification_retention_days
    cutoff = retention_cutoff(retention_days, now=now)
    table = NotificationModel.__table__
    result = connection.execute(
        update(table)
        .where(table.c.is_read.is_(False))
        .where(table.c.created_at < cutoff)
        .values(is_read=True)
    )
    if result.rowcount:
        logger.debug("Marked %s stale notifications as read", result.rowcount)
    return result.rowcount


@event.listens_for(NotificationModel, "after_insert")
def _sweep_after_insert(mapper, connection: Connection, target: NotificationModel) -> None:
    mark_stale_notifications_read(connection)


__all__ = ["NotificationModel", "mark_stale_notifications_read"]
