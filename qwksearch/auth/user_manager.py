"""User manager integration for fastapi-users."""
from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from typing import Optional

from fastapi import Depends, Request
from fastapi_users import BaseUserManager
from fastapi_users_db_sqlalchemy import SQLAlchemyUserDatabase

from ..config import Settings
from ..dependencies import get_db_session, get_settings
from ..infrastructure.database import User

LOGGER = logging.getLogger(__name__)


class UserManager(BaseUserManager[User, str]):
    """Application specific user manager."""

    user_db_model = User

    def __init__(self, user_db: SQLAlchemyUserDatabase[User, str], settings: Settings) -> None:
        super().__init__(user_db)
        self._settings = settings

    @property
    def reset_password_token_secret(self) -> str:
        return self._settings.fastapi.secret_key

    @property
    def verification_token_secret(self) -> str:
        return self._settings.fastapi.secret_key

    def parse_id(self, value: object) -> str:
        return str(value)

    async def on_after_register(self, user: User, request: Optional[Request] = None) -> None:  # noqa: ARG002
        LOGGER.info("User registered | user=%s", user.id)


async def get_user_db(session=Depends(get_db_session)) -> AsyncGenerator[SQLAlchemyUserDatabase[User, str], None]:
    """Yield a SQLAlchemy-backed user database."""

    yield SQLAlchemyUserDatabase(session, User)


async def get_user_manager(
    user_db: SQLAlchemyUserDatabase[User, str] = Depends(get_user_db),
    settings: Settings = Depends(get_settings),
) -> AsyncGenerator[UserManager, None]:
    """Yield the configured user manager."""

    yield UserManager(user_db, settings)


__all__ = ["UserManager", "get_user_manager", "get_user_db"]
