"""
Authentication endpoints: sign-up, login, logout and the current session.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from event_hub.core.security import get_current_principal
from event_hub.db.session import get_db
from event_hub.schemas.user import LoginRequest, SessionResponse, SignUpRequest, Token, UserResponse
from event_hub.services.auth_service import get_session, get_user, sign_in, sign_out, sign_up
from event_hub.store.principal import Principal

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/signup", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def signup(user_data: SignUpRequest, db: AsyncSession = Depends(get_db)):
    """Create an account. A profile is created for it automatically."""
    return await sign_up(db, user_data)


@router.post("/login", response_model=Token)
async def login(login_data: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Authenticate and receive a bearer token bound to a new session."""
    return await sign_in(db, login_data)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Revoke the session behind the presented token."""
    await sign_out(db, principal)


@router.get("/session", response_model=SessionResponse)
async def current_session(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return await get_session(db, principal)


@router.get("/user", response_model=UserResponse)
async def current_user(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return await get_user(db, principal)
