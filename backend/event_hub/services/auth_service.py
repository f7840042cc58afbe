"""
Identity service: sign-up, sign-in, sign-out and the current session.

Identities and sessions live outside the row-level policy set; this service
is their only writer.
"""

from datetime import timedelta

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from event_hub.core.config import get_settings
from event_hub.core.errors import ConstraintViolationError, NotFoundError
from event_hub.core.logging import get_logger
from event_hub.core.security import create_access_token, hash_password, verify_password
from event_hub.db.base import utcnow
from event_hub.models.auth_session import AuthSession
from event_hub.models.user import User
from event_hub.schemas.user import LoginRequest, SessionResponse, SignUpRequest, Token
from event_hub.store.principal import Principal

logger = get_logger(__name__)
settings = get_settings()


async def sign_up(db: AsyncSession, user_data: SignUpRequest) -> User:
    """
    Create a new identity. Its profile is created by the bootstrap trigger
    in the same flush.
    Raises 409 if the email is already registered.
    """
    email = user_data.email.lower()
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        logger.warning("signup_failed", reason="email_exists", email=email)
        raise ConstraintViolationError("Email already registered")

    metadata = {}
    if user_data.display_name:
        metadata["display_name"] = user_data.display_name

    user = User(
        email=email,
        hashed_password=hash_password(user_data.password),
        user_metadata=metadata,
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        logger.warning("signup_failed", reason="integrity_error", email=email)
        raise ConstraintViolationError("Email already registered") from e
    await db.refresh(user)

    logger.info("user_signed_up", user_id=str(user.id), email=user.email)
    return user


async def sign_in(db: AsyncSession, login_data: LoginRequest) -> Token:
    """
    Authenticate, open a session and return its access token.
    Raises 401 if credentials are invalid.
    """
    email = login_data.email.lower()
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(login_data.password, user.hashed_password):
        logger.warning("login_failed", email=email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is deactivated",
        )

    expires_at = utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    auth_session = AuthSession(user_id=user.id, expires_at=expires_at)
    db.add(auth_session)
    await db.flush()

    token = create_access_token(
        data={"sub": str(user.id), "sid": str(auth_session.id)},
        expires_at=expires_at,
    )
    logger.info("user_logged_in", user_id=str(user.id), session_id=str(auth_session.id))
    return Token(access_token=token, expires_at=expires_at)


async def _current_session(db: AsyncSession, principal: Principal) -> AuthSession:
    auth_session = await db.get(AuthSession, principal.session_id)
    if auth_session is None:
        raise NotFoundError("Session", principal.session_id)
    return auth_session


async def sign_out(db: AsyncSession, principal: Principal) -> None:
    """Revoke the session behind the caller's token."""
    auth_session = await _current_session(db, principal)
    auth_session.revoked_at = utcnow()
    await db.flush()
    logger.info("user_logged_out", user_id=str(principal.user_id), session_id=str(auth_session.id))


async def get_session(db: AsyncSession, principal: Principal) -> SessionResponse:
    auth_session = await _current_session(db, principal)
    return SessionResponse(
        session_id=auth_session.id,
        user_id=auth_session.user_id,
        created_at=auth_session.created_at,
        expires_at=auth_session.expires_at,
        active=auth_session.is_active(),
    )


async def get_user(db: AsyncSession, principal: Principal) -> User:
    user = await db.get(User, principal.user_id)
    if user is None:
        raise NotFoundError("User", principal.user_id)
    return user
