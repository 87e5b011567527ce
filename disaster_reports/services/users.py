"""User service functions for registration and authentication."""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from disaster_reports.core.exceptions import AuthError, UsernameTakenError
from disaster_reports.core.security import PasswordHasher
from disaster_reports.models.user import User, UserRole
from disaster_reports.schemas.user import UserCreate

logger = logging.getLogger(__name__)

_dummy_hash: str | None = None


def _verify_against_dummy(password: str) -> None:
    # Burn the same hashing cost for unknown usernames as for wrong passwords.
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = PasswordHasher.hash("disaster-reports-dummy-password")
    PasswordHasher.verify(password, _dummy_hash)


async def get_user_by_username(session: AsyncSession, username: str) -> User | None:
    normalized = username.lower()
    result = await session.execute(select(User).where(User.username == normalized))
    return result.scalar_one_or_none()


async def create_user(session: AsyncSession, user_in: UserCreate, role: UserRole = UserRole.USER) -> User:
    normalized = user_in.username.lower()
    if await get_user_by_username(session, normalized):
        raise UsernameTakenError(normalized)
    user = User(
        username=normalized,
        password_hash=PasswordHasher.hash(user_in.password),
        role=role.value,
        name=user_in.name,
    )
    session.add(user)
    await session.flush()
    return user


async def authenticate_user(session: AsyncSession, username: str, password: str) -> User:
    user = await get_user_by_username(session, username)
    if not user:
        _verify_against_dummy(password)
        raise AuthError()
    if not PasswordHasher.verify(password, user.password_hash):
        raise AuthError()
    return user


async def ensure_admin(session: AsyncSession, username: str, password: str, name: str | None = None) -> User:
    """Create the admin account unless one with ``username`` already exists."""

    existing = await get_user_by_username(session, username)
    if existing:
        return existing
    user = User(
        username=username.lower(),
        password_hash=PasswordHasher.hash(password),
        role=UserRole.ADMIN.value,
        name=name,
    )
    session.add(user)
    await session.flush()
    logger.info("Created default admin user %s", user.username)
    return user
