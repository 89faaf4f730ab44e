"""Dependencies for the chat module."""
from __future__ import annotations

import httpx
from fastapi import Request

from ..config import Settings
from ..infrastructure.database import AsyncSessionFactory
from ..infrastructure.llm.registry import ModelRegistry
from ..search.service import SearchService
from .focus.router import build_default_router
from .service import ChatService
from .store import ChatSessionStore
from .suggestions import SuggestionGenerator


def build_chat_service(
    settings: Settings,
    session_factory: AsyncSessionFactory,
    search_service: SearchService,
    *,
    llm_transport: httpx.AsyncBaseTransport | None = None,
) -> ChatService:
    """Assemble the chat stack; one instance lives for the whole application."""

    return ChatService(
        store=ChatSessionStore(session_factory, title_max_length=settings.chat.title_max_length),
        focus_router=build_default_router(search_service, settings),
        model_registry=ModelRegistry(settings.llm, transport=llm_transport),
        suggestion_generator=SuggestionGenerator(),
        settings=settings,
    )


async def get_chat_service(request: Request) -> ChatService:
    return request.app.state.chat_service


__all__ = ["build_chat_service", "get_chat_service"]
