"""Durable chat state for authenticated callers."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..exceptions import PersistenceError
from ..infrastructure.database import AsyncSessionFactory, Chat, Message
from ..infrastructure.repositories.chat_repo import ChatRepository
from .constants import DEFAULT_CHAT_TITLE
from .exceptions import ChatNotFoundError

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class TurnState:
    """What has been persisted after a user message so far."""

    source_count: int = 0
    has_suggestions: bool = False


def derive_title(content: str, *, max_length: int = 60) -> str:
    cleaned = " ".join(content.strip().split())
    if not cleaned:
        return DEFAULT_CHAT_TITLE
    if len(cleaned) <= max_length:
        return cleaned
    return cleaned[: max_length - 1].rstrip() + "…"


class ChatSessionStore:
    """Owner-scoped chat persistence.

    Each operation opens its own session from the factory, so writers keep
    working after the HTTP request that started them has gone away.
    """

    def __init__(self, session_factory: AsyncSessionFactory, *, title_max_length: int = 60) -> None:
        self._session_factory = session_factory
        self._title_max_length = title_max_length

    async def save_user_turn(
        self,
        *,
        chat_id: str,
        user_id: str,
        message_id: str,
        content: str,
        focus_mode: str,
        files: list[dict[str, Any]],
    ) -> bool:
        """Persist the user's message, creating the chat on first use.

        Returns ``True`` when ``message_id`` was already stored, in which case
        every later message of the chat is deleted instead of inserting a
        duplicate (a rewrite of that turn).
        """

        try:
            async with self._session_factory() as session:
                repo = ChatRepository(session)
                chat = await repo.get_chat(chat_id, user_id)
                if chat is None:
                    chat = await self._create_chat(
                        repo,
                        chat_id=chat_id,
                        user_id=user_id,
                        content=content,
                        focus_mode=focus_mode,
                        files=files,
                    )
                if list(chat.files or []) != files:
                    chat.files = files
                    LOGGER.info("Chat files updated | chat=%s files=%d", chat_id, len(files))

                existing = await repo.find_message(chat_id, message_id, role="user")
                if existing is None:
                    await repo.add_message(
                        chat_id=chat_id,
                        user_id=user_id,
                        message_id=message_id,
                        role="user",
                        content=content,
                    )
                    rewrite = False
                else:
                    deleted = await repo.delete_messages_after(chat_id, existing.id)
                    LOGGER.info(
                        "Chat turn rewritten | chat=%s message=%s ordinal=%d deleted=%d",
                        chat_id,
                        message_id,
                        existing.id,
                        deleted,
                    )
                    rewrite = True
                await repo.commit()
                return rewrite
        except SQLAlchemyError as exc:
            raise PersistenceError(cause=exc) from exc

    async def _create_chat(
        self,
        repo: ChatRepository,
        *,
        chat_id: str,
        user_id: str,
        content: str,
        focus_mode: str,
        files: list[dict[str, Any]],
    ) -> Chat:
        """Insert the chat row, or adopt it when the same owner inserted it first.

        A primary-key conflict means the id already exists; the owner-scoped
        re-read tells a concurrent first message apart from someone else's chat.
        """

        try:
            chat = await repo.create_chat(
                chat_id=chat_id,
                user_id=user_id,
                title=derive_title(content, max_length=self._title_max_length),
                focus_mode=focus_mode,
                files=files,
            )
        except IntegrityError as exc:
            await repo.session.rollback()
            chat = await repo.get_chat(chat_id, user_id)
            if chat is not None:
                LOGGER.info("Chat created concurrently; reusing it | chat=%s user=%s", chat_id, user_id)
                return chat
            if await repo.get(chat_id) is not None:
                raise ChatNotFoundError() from exc
            raise
        LOGGER.info("Chat created | chat=%s user=%s focus_mode=%s", chat_id, user_id, focus_mode)
        return chat

    async def append_message(
        self,
        *,
        chat_id: str,
        user_id: str,
        message_id: str,
        role: str,
        content: str = "",
        sources: list[dict[str, Any]] | None = None,
        suggestions: list[str] | None = None,
    ) -> int:
        """Append one message and return its ordinal."""

        try:
            async with self._session_factory() as session:
                repo = ChatRepository(session)
                message = await repo.add_message(
                    chat_id=chat_id,
                    user_id=user_id,
                    message_id=message_id,
                    role=role,
                    content=content,
                    sources=sources,
                    suggestions=suggestions,
                )
                ordinal = message.id
                await repo.commit()
                return ordinal
        except SQLAlchemyError as exc:
            raise PersistenceError(cause=exc) from exc

    async def turn_state(self, chat_id: str, assistant_message_id: str) -> TurnState:
        """Summarise the source and suggestion rows stored for one answer."""

        try:
            async with self._session_factory() as session:
                repo = ChatRepository(session)
                state = TurnState()
                for message in await repo.list_turn_messages(chat_id, assistant_message_id):
                    if message.role == "source":
                        state.source_count += len(message.sources or [])
                    elif message.role == "suggestion":
                        state.has_suggestions = True
                return state
        except SQLAlchemyError as exc:
            raise PersistenceError(cause=exc) from exc

    async def list_chats(self, user_id: str) -> list[Chat]:
        try:
            async with self._session_factory() as session:
                return await ChatRepository(session).list_chats(user_id)
        except SQLAlchemyError as exc:
            raise PersistenceError(cause=exc) from exc

    async def get_chat_with_messages(self, chat_id: str, user_id: str) -> tuple[Chat, list[Message]]:
        try:
            async with self._session_factory() as session:
                repo = ChatRepository(session)
                chat = await repo.get_chat(chat_id, user_id)
                if chat is None:
                    raise ChatNotFoundError()
                return chat, await repo.list_messages(chat_id)
        except SQLAlchemyError as exc:
            raise PersistenceError(cause=exc) from exc

    async def delete_chat(self, chat_id: str, user_id: str) -> None:
        try:
            async with self._session_factory() as session:
                repo = ChatRepository(session)
                chat = await repo.get_chat(chat_id, user_id)
                if chat is None:
                    raise ChatNotFoundError()
                await repo.delete_chat(chat)
                await repo.commit()
                LOGGER.info("Chat deleted | chat=%s user=%s", chat_id, user_id)
        except SQLAlchemyError as exc:
            raise PersistenceError(cause=exc) from exc


__all__ = ["ChatSessionStore", "TurnState", "derive_title"]
