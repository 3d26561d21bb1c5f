"""Caller identity resolved once at the HTTP boundary."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AuthContext:
    """Identity of the user on whose behalf a request runs.

    Every notification operation is scoped to ``user_id``; it is never read
    from request parameters.
    """

    user_id: int
    email: str | None = None
    role: str | None = None


__all__ = ["AuthContext"]
