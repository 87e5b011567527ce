"""Authentication-related schemas."""
from __future__ import annotations

from pydantic import BaseModel, Field

from disaster_reports.schemas.user import UserPublic


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1, max_length=128)


class LoginResponse(BaseModel):
    user: UserPublic
