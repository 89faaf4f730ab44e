"""Authentication dependencies."""
from __future__ import annotations

import inspect
import logging
from functools import update_wrapper
from typing import Any, Awaitable, Callable, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi_users import FastAPIUsers
from fastapi_users.authentication import AuthenticationBackend

from ..config import Settings
from ..dependencies import get_settings
from ..infrastructure.database import User
from .auth_backend import get_auth_backend
from .constants import BEARER_PREFIX
from .exceptions import AuthRequiredError, AuthTransportError
from .user_manager import UserManager, get_user_manager

LOGGER = logging.getLogger(__name__)


class _ConfigurableDependency:
    """Wrapper that allows late binding of FastAPI dependency callables."""

    def __init__(self, name: str) -> None:
        self._name = name
        self._dependency: Optional[Callable[..., Awaitable[Any]]] = None
        self.__doc__ = f"Dynamic dependency placeholder for {name}."

    def configure(self, dependency: Callable[..., Awaitable[Any]]) -> None:
        self._dependency = dependency
        update_wrapper(self, dependency)
        self.__signature__ = inspect.signature(dependency)

    async def __call__(self, *args: Any, **kwargs: Any) -> Any:
        if self._dependency is None:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Authentication dependency '{self._name}' is not configured.",
            )
        return await self._dependency(*args, **kwargs)


_fastapi_users: FastAPIUsers[User, str] | None = None
_auth_backend: AuthenticationBackend | None = None
current_active_user = _ConfigurableDependency("current_active_user")


def configure_auth(settings: Settings) -> FastAPIUsers[User, str]:
    """Initialise FastAPI Users integration with the provided settings."""

    global _fastapi_users, _auth_backend
    backend = get_auth_backend(settings)
    users = FastAPIUsers[User, str](get_user_manager, [backend])
    current_active_user.configure(users.current_user(active=True))
    _fastapi_users = users
    _auth_backend = backend
    return users


def get_fastapi_users() -> FastAPIUsers[User, str]:
    """Return the configured FastAPI Users instance."""

    global _fastapi_users
    if _fastapi_users is None:
        configure_auth(get_settings())
    assert _fastapi_users is not None
    return _fastapi_users


def get_auth_backend_instance() -> AuthenticationBackend:
    """Return the configured authentication backend."""

    global _auth_backend
    if _auth_backend is None:
        configure_auth(get_settings())
    assert _auth_backend is not None
    return _auth_backend


async def get_current_user(user: User = Depends(current_active_user)) -> User:
    """Dependency returning the currently authenticated user."""

    return user


async def resolve_identity(
    request: Request,
    user_manager: UserManager = Depends(get_user_manager),
) -> str | None:
    """Return the caller's user id, or ``None`` for guests.

    Missing, malformed, expired or revoked tokens all mean "guest". Only a
    failure of the check itself, for a caller that did present a bearer
    token, is reported as an error.
    """

    authorization = request.headers.get("Authorization") or ""
    if not authorization.lower().startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX) :].strip()
    if not token:
        return None

    strategy = get_auth_backend_instance().get_strategy()
    try:
        user = await strategy.read_token(token, user_manager)
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Identity check failed for a bearer token", exc_info=exc)
        raise AuthTransportError() from exc
    if user is None or not getattr(user, "is_active", False):
        return None
    return str(user.id)


async def require_identity(user_id: str | None = Depends(resolve_identity)) -> str:
    """Return the caller's user id or fail with 401 for guests."""

    if user_id is None:
        raise AuthRequiredError()
    return user_id


# Configure the dependency graph with default settings so that router modules can import it.
configure_auth(get_settings())


__all__ = [
    "configure_auth",
    "current_active_user",
    "get_auth_backend_instance",
    "get_current_user",
    "get_fastapi_users",
    "require_identity",
    "resolve_identity",
]
