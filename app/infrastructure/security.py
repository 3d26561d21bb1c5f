"""Helpers to verify the bearer tokens issued by the marketplace auth service."""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from app.config import get_settings

ALGORITHM = "HS256"
DEFAULT_TOKEN_TTL = timedelta(minutes=60)


def decode_access_token(token: str) -> dict:
    settings = get_settings()
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError as exc:
        raise ValueError("Could not validate credentials") from exc


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Sign ``data`` the way the auth service does (used by tests and local tooling)."""

    settings = get_settings()
    expire = datetime.now(timezone.utc) + (expires_delta or DEFAULT_TOKEN_TTL)
    return jwt.encode({**data, "exp": expire}, settings.secret_key, algorithm=ALGORITHM)
