"""FastAPI dependency utilities."""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.domain.entities import AuthContext
from app.infrastructure.security import decode_access_token

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str = "Token is not valid") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def resolve_auth_context(token: str) -> AuthContext:
    """Build the caller identity from a signed access token."""

    try:
        payload = decode_access_token(token)
    except ValueError as exc:
        raise _unauthorized() from exc

    raw_user_id = payload.get("sub", payload.get("id"))
    try:
        user_id = int(raw_user_id)
    except (TypeError, ValueError) as exc:
        raise _unauthorized() from exc
    if user_id <= 0:
        raise _unauthorized()

    email = payload.get("email")
    role = payload.get("role")
    return AuthContext(
        user_id=user_id,
        email=email if isinstance(email, str) else None,
        role=role if isinstance(role, str) else None,
    )


def get_auth_context(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> AuthContext:
    """Return the identity of the authenticated caller."""

    if credentials is None or credentials.scheme.lower() != "bearer":
        raise _unauthorized("No token, authorization denied")
    return resolve_auth_context(credentials.credentials)
