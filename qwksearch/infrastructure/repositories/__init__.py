"""Repository package exports."""

from .base import AsyncRepository
from .chat_repo import ChatRepository
from .user_repo import UserRepository

__all__ = [
    "AsyncRepository",
    "ChatRepository",
    "UserRepository",
]
