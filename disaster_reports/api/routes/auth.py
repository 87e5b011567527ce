"""Authentication endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from disaster_reports.core.config import Settings
from disaster_reports.core.dependencies import SESSION_COOKIE_NAME, get_app_settings, get_current_user, get_db
from disaster_reports.core.exceptions import AuthError, UsernameTakenError
from disaster_reports.core.security import SessionSigner
from disaster_reports.models.user import User
from disaster_reports.schemas.auth import LoginRequest, LoginResponse
from disaster_reports.schemas.user import UserCreate, UserPublic
from disaster_reports.services.users import authenticate_user, create_user

router = APIRouter(tags=["auth"])


def _set_session_cookie(response: Response, user: User, settings: Settings) -> None:
    token = SessionSigner(settings.secret_key).dumps({"sub": user.username})
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        max_age=settings.access_token_expire_minutes * 60,
    )


@router.post("/register", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
async def register_user(payload: UserCreate, session: AsyncSession = Depends(get_db)) -> UserPublic:
    try:
        user = await create_user(session, payload)
    except UsernameTakenError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    await session.commit()
    return UserPublic.model_validate(user)


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    response: Response,
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> LoginResponse:
    try:
        user = await authenticate_user(session, payload.username, payload.password)
    except AuthError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc

    _set_session_cookie(response, user, settings)
    return LoginResponse(user=UserPublic.model_validate(user))


@router.post("/logout", status_code=status.HTTP_200_OK)
async def logout(response: Response) -> None:
    response.delete_cookie(SESSION_COOKIE_NAME)


@router.get("/me", response_model=UserPublic)
async def get_current_user_info(current_user: User = Depends(get_current_user)) -> UserPublic:
    return UserPublic.model_validate(current_user)
