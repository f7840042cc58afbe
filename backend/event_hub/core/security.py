"""
Password hashing, access tokens and the caller-resolution dependencies.

Tokens are HS256 JWTs carrying `sub` (user id) and `sid` (session id). A
token is only accepted while its session row is active and the user is
active, so sign-out takes effect immediately.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from werkzeug.security import check_password_hash, generate_password_hash

from event_hub.core.config import get_settings
from event_hub.core.logging import bind_caller, get_logger
from event_hub.db.session import get_db
from event_hub.models.auth_session import AuthSession
from event_hub.models.user import User
from event_hub.store.principal import Principal

logger = get_logger(__name__)
settings = get_settings()

bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    return check_password_hash(hashed_password, password)


def create_access_token(data: dict, expires_at: Optional[datetime] = None) -> str:
    to_encode = data.copy()
    if expires_at is None:
        expires_at = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode["exp"] = int(expires_at.timestamp())
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])


def _unauthorized(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def _resolve_principal(db: AsyncSession, token: str) -> Principal:
    try:
        payload = decode_access_token(token)
        user_id = uuid.UUID(payload["sub"])
        session_id = uuid.UUID(payload["sid"])
    except (JWTError, KeyError, ValueError, TypeError):
        logger.warning("token_rejected", reason="invalid_token")
        raise _unauthorized()

    result = await db.execute(
        select(AuthSession, User)
        .join(User, User.id == AuthSession.user_id)
        .where(AuthSession.id == session_id, AuthSession.user_id == user_id)
    )
    row = result.one_or_none()
    if row is None:
        logger.warning("token_rejected", reason="unknown_session")
        raise _unauthorized()

    auth_session, user = row
    if not auth_session.is_active():
        logger.info("token_rejected", reason="session_inactive", session_id=str(session_id))
        raise _unauthorized("Session expired or signed out")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is deactivated")

    return Principal(user_id=user.id, email=user.email, session_id=auth_session.id)


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Principal:
    """Dependency for routes that require an authenticated caller."""
    if credentials is None:
        raise _unauthorized("Not authenticated")
    principal = await _resolve_principal(db, credentials.credentials)
    bind_caller(str(principal.user_id))
    return principal


async def get_optional_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Principal:
    """Dependency for routes that anonymous callers may also use."""
    if credentials is None:
        bind_caller(None)
        return Principal.anonymous()
    principal = await _resolve_principal(db, credentials.credentials)
    bind_caller(str(principal.user_id))
    return principal
