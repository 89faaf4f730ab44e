"""FastAPI application factory."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from . import dependencies
from .auth.dependencies import configure_auth, get_auth_backend_instance
from .auth.models import UserCreate, UserRead, UserUpdate
from .auth.router import router as auth_router
from .chat.dependencies import build_chat_service
from .chat.router import router as chat_router
from .exceptions import PlatformError
from .logging import setup_logging
from .search.dependencies import build_search_service
from .search.router import router as search_router

LOGGER = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = dependencies.get_settings()
    setup_logging(settings)

    session_factory = dependencies.get_session_factory()

    app = FastAPI(
        title=settings.fastapi.title,
        description=settings.fastapi.description,
        version=settings.fastapi.version,
        docs_url=settings.fastapi.docs_url,
        redoc_url=settings.fastapi.redoc_url,
        openapi_url=settings.fastapi.openapi_url,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.fastapi.cors_allow_origins,
        allow_credentials=settings.fastapi.cors_allow_credentials,
        allow_methods=settings.fastapi.cors_allow_methods,
        allow_headers=settings.fastapi.cors_allow_headers,
    )
    app.add_middleware(GZipMiddleware, minimum_size=settings.fastapi.gzip_minimum_size)

    fastapi_users = configure_auth(settings)
    auth_backend = get_auth_backend_instance()

    app.include_router(
        fastapi_users.get_auth_router(auth_backend),
        prefix="/auth/jwt",
        tags=["auth"],
    )
    app.include_router(
        fastapi_users.get_register_router(UserRead, UserCreate),
        prefix="/auth",
        tags=["auth"],
    )
    app.include_router(
        fastapi_users.get_users_router(UserRead, UserUpdate),
        prefix="/users",
        tags=["users"],
    )
    app.include_router(auth_router, prefix="/auth", tags=["auth"])
    app.include_router(search_router, prefix="/api", tags=["search"])
    app.include_router(chat_router, prefix="/api", tags=["chat"])

    app.state.chat_service = build_chat_service(settings, session_factory, build_search_service(settings.search))

    @app.exception_handler(PlatformError)
    async def _platform_error_handler(request: Request, exc: PlatformError) -> JSONResponse:
        if exc.status_code >= 500:
            LOGGER.error("Request failed | path=%s error=%s", request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.payload())

    @app.on_event("shutdown")
    async def _drain_chat_writers() -> None:
        await app.state.chat_service.wait_for_background()

    return app


app = create_app()
