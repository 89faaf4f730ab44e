"""Chat repository implementation."""
from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import Chat, Message
from .base import AsyncRepository


class ChatRepository(AsyncRepository[Chat]):
    """Manage chats and their ordered messages.

    Every chat lookup is scoped by owner; message queries assume the caller
    already resolved an owned chat.
    """

    model = Chat

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def create_chat(
        self,
        *,
        chat_id: str,
        user_id: str,
        title: str,
        focus_mode: str,
        files: list[dict[str, Any]] | None = None,
    ) -> Chat:
        chat = Chat(id=chat_id, user_id=user_id, title=title, focus_mode=focus_mode, files=files or [])
        await self.add(chat)
        return chat

    async def get_chat(self, chat_id: str, user_id: str) -> Optional[Chat]:
        stmt = select(Chat).where(
            Chat.id == chat_id,
            Chat.user_id == user_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_chats(self, user_id: str) -> list[Chat]:
        chats = await self.filter_by(Chat.created_at, user_id=user_id)
        return list(reversed(chats))

    async def delete_chat(self, chat: Chat) -> None:
        await self.session.execute(delete(Message).where(Message.chat_id == chat.id))
        await self.delete(chat)

    async def add_message(
        self,
        *,
        chat_id: str,
        user_id: str | None,
        message_id: str,
        role: str,
        content: str = "",
        sources: list[dict[str, Any]] | None = None,
        suggestions: list[str] | None = None,
    ) -> Message:
        message = Message(
            chat_id=chat_id,
            user_id=user_id,
            message_id=message_id,
            role=role,
            content=content,
            sources=sources or [],
            suggestions=suggestions or [],
        )
        self.session.add(message)
        await self.session.flush()
        await self.session.refresh(message)
        return message

    async def list_messages(self, chat_id: str) -> list[Message]:
        stmt = select(Message).where(Message.chat_id == chat_id).order_by(Message.id)
        result = await self.session.execute(stmt)
        return list(result.scalars())

    async def find_message(self, chat_id: str, message_id: str, role: str | None = None) -> Optional[Message]:
        stmt = select(Message).where(Message.chat_id == chat_id, Message.message_id == message_id)
        if role is not None:
            stmt = stmt.where(Message.role == role)
        result = await self.session.execute(stmt.order_by(Message.id).limit(1))
        return result.scalars().first()

    async def list_turn_messages(self, chat_id: str, message_id: str) -> list[Message]:
        stmt = select(Message).where(Message.chat_id == chat_id, Message.message_id == message_id).order_by(Message.id)
        result = await self.session.execute(stmt)
        return list(result.scalars())

    async def delete_messages_after(self, chat_id: str, ordinal: int) -> int:
        """Drop every message of the chat positioned after ``ordinal``.

        A single conditional statement keyed on the row ordinal, so appends
        racing with the rewrite either land before it (and are removed) or
        after it (and survive).
        """

        result = await self.session.execute(
            delete(Message).where(Message.chat_id == chat_id, Message.id > ordinal)
        )
        return int(result.rowcount or 0)


__all__ = ["ChatRepository"]
