"""Focus-mode handlers and their router."""

from .base import FocusContext, FocusModeHandler
from .router import FocusModeRouter, build_default_router
from .search import SearchAnswerHandler
from .writing import WritingAssistantHandler

__all__ = [
    "FocusContext",
    "FocusModeHandler",
    "FocusModeRouter",
    "SearchAnswerHandler",
    "WritingAssistantHandler",
    "build_default_router",
]
