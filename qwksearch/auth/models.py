"""Pydantic schemas for FastAPI Users integration."""
from __future__ import annotations

from typing import Optional

from fastapi_users import schemas
from pydantic import ConfigDict, EmailStr

from ..infrastructure.database import User


class UserRead(schemas.BaseUser[str]):
    """Representation returned by the authentication endpoints."""

    full_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class UserCreate(schemas.BaseUserCreate):
    """Schema used when registering a new user."""

    email: EmailStr
    full_name: Optional[str] = None


class UserUpdate(schemas.BaseUserUpdate):
    """Schema used for partial updates of existing users."""

    full_name: Optional[str] = None


__all__ = ["UserRead", "UserCreate", "UserUpdate", "User"]
