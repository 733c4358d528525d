"""Request-scoped dependencies: the auth service and the caller's user id."""

from typing import Annotated

import jwt
from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.core.security import (
    BcryptPasswordHasher,
    JwtTokenIssuer,
    get_password_hasher,
    get_token_issuer,
)
from app.services.auth import AuthService
from app.services.user_store import SqlAlchemyUserStore

security = HTTPBearer(auto_error=False)

# users.id is a 32-bit INTEGER column.
MAX_USER_ID = 2**31 - 1


def get_auth_service(
    db: Annotated[Session, Depends(get_db)],
    hasher: Annotated[BcryptPasswordHasher, Depends(get_password_hasher)],
    issuer: Annotated[JwtTokenIssuer, Depends(get_token_issuer)],
) -> AuthService:
    """Build an AuthService bound to this request's DB session."""
    return AuthService(SqlAlchemyUserStore(db), hasher, issuer)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    issuer: Annotated[JwtTokenIssuer, Depends(get_token_issuer)],
    settings: Annotated[Settings, Depends(get_settings)],
    x_user_id: Annotated[str | None, Header()] = None,
) -> int:
    """
    Dependency: resolve the caller's user id.

    Normally taken from the `sub` claim of a valid Bearer JWT. When
    TRUST_USER_ID_HEADER is enabled, an X-User-Id header set by an upstream
    gateway is accepted instead. Raises 401 if neither yields an id.
    """
    if credentials is not None:
        try:
            payload = issuer.decode(credentials.credentials)
        except jwt.PyJWTError:
            raise _unauthorized("Invalid or expired token")
        try:
            user_id = int(payload.get("sub"))
        except (TypeError, ValueError):
            raise _unauthorized("Invalid token payload")
        if not 0 < user_id <= MAX_USER_ID:
            raise _unauthorized("Invalid token payload")
        return user_id

    if settings.TRUST_USER_ID_HEADER and x_user_id is not None:
        try:
            user_id = int(x_user_id)
        except ValueError:
            user_id = 0
        if not 0 < user_id <= MAX_USER_ID:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"X-User-Id must be an integer between 1 and {MAX_USER_ID}",
            )
        return user_id

    raise _unauthorized("Not authenticated")
