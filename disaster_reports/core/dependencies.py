"""Reusable dependencies for FastAPI routes."""
from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from disaster_reports.core.config import Settings, get_settings
from disaster_reports.core.security import SessionSigner
from disaster_reports.db.session import get_session
from disaster_reports.models.user import User
from disaster_reports.services.geocoding import Geocoder
from disaster_reports.services.transitions import TransitionPolicy
from disaster_reports.services.users import get_user_by_username

SESSION_COOKIE_NAME = "disaster_session"


async def get_db() -> AsyncIterator[AsyncSession]:
    async with get_session() as session:
        yield session


def get_app_settings() -> Settings:
    return get_settings()


def get_geocoder(settings: Settings = Depends(get_app_settings)) -> Geocoder:
    return Geocoder(settings)


def get_transition_policy(settings: Settings = Depends(get_app_settings)) -> TransitionPolicy:
    return TransitionPolicy(strict=settings.strict_status_transitions)


async def get_current_user(
    request: Request,
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> User:
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    signer = SessionSigner(settings.secret_key)
    try:
        payload = signer.loads(token, max_age=settings.access_token_expire_minutes * 60)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid session") from exc

    username = payload.get("sub")
    if not username:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid session")

    user = await get_user_by_username(session, username)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")

    return user
