"""Chat orchestration package."""

from .bus import AnswerEventBus, EventSubscription
from .service import ChatService
from .store import ChatSessionStore
from .stream import StreamEvent

__all__ = ["AnswerEventBus", "ChatService", "ChatSessionStore", "EventSubscription", "StreamEvent"]
