"""Map focus-mode keys onto their handlers."""
from __future__ import annotations

from collections.abc import Mapping

from ...config import Settings
from ...search.service import SearchService
from ..constants import (
    ACADEMIC_SEARCH,
    REDDIT_SEARCH,
    WEB_SEARCH,
    WOLFRAM_ALPHA_SEARCH,
    WRITING_ASSISTANT,
    YOUTUBE_SEARCH,
)
from ..exceptions import UnknownFocusModeError
from ..prompts import COMPUTATION_PROMPT
from .base import FocusModeHandler
from .search import SearchAnswerHandler
from .writing import WritingAssistantHandler


class FocusModeRouter:
    """Plain lookup from focus-mode key to handler."""

    def __init__(self, handlers: Mapping[str, FocusModeHandler]) -> None:
        self._handlers = dict(handlers)

    def resolve(self, focus_mode: str) -> FocusModeHandler:
        handler = self._handlers.get(focus_mode)
        if handler is None:
            raise UnknownFocusModeError(focus_mode)
        return handler


def build_default_router(search_service: SearchService, settings: Settings) -> FocusModeRouter:
    limits = {
        "max_results": min(settings.search.max_results, settings.chat.max_context_results),
        "file_context_chars": settings.chat.file_context_chars,
    }
    handlers: list[FocusModeHandler] = [
        SearchAnswerHandler(WEB_SEARCH, search_service, category="general", **limits),
        SearchAnswerHandler(ACADEMIC_SEARCH, search_service, category="science", **limits),
        SearchAnswerHandler(
            WOLFRAM_ALPHA_SEARCH,
            search_service,
            category="general",
            query_prefix="!wa ",
            prompt_template=COMPUTATION_PROMPT,
            **limits,
        ),
        SearchAnswerHandler(YOUTUBE_SEARCH, search_service, category="videos", **limits),
        SearchAnswerHandler(REDDIT_SEARCH, search_service, category="social+media", **limits),
        WritingAssistantHandler(WRITING_ASSISTANT, file_context_chars=settings.chat.file_context_chars),
    ]
    return FocusModeRouter({handler.key: handler for handler in handlers})


__all__ = ["FocusModeRouter", "build_default_router"]
