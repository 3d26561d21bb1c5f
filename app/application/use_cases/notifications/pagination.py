"""Pagination bounds shared by the notification listings."""

from __future__ import annotations

from app.config import get_settings


def resolve_page(limit: int | None, offset: int | None) -> tuple[int, int]:
    """Apply defaults and the configured upper bound to ``limit``/``offset``.

    Negative values are rejected; a ``limit`` above the configured maximum is
    clamped rather than rejected.
    """

    settings = get_settings()
    if limit is None:
        limit = settings.notifications_default_page_size
    if offset is None:
        offset = 0
    if limit < 0 or offset < 0:
        raise ValueError("limit and offset must be non-negative integers")
    return min(limit, settings.notifications_max_page_size), offset


__all__ = ["resolve_page"]
