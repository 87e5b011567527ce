"""Pydantic schemas for user operations."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=64, pattern=r"^[a-zA-Z0-9_.\-]+$")
    password: str = Field(..., min_length=8, max_length=128)
    name: str | None = Field(default=None, max_length=255)


class UserPublic(BaseModel):
    """User projection safe to return to clients; never carries the password hash."""

    id: int
    username: str
    role: str
    name: str | None = None

    model_config = ConfigDict(from_attributes=True)
