"""Chat orchestration: validate, persist, dispatch and stream one answer."""
from __future__ import annotations

import asyncio
import logging
import secrets
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from time import perf_counter
from typing import Any

from ..config import Settings
from ..exceptions import PersistenceError
from ..infrastructure.database import Chat, Message
from ..infrastructure.llm.base import ChatTurn, LLMClient
from ..infrastructure.llm.registry import ModelRegistry
from .bus import AnswerEventBus, EventSubscription
from .exceptions import ModelInvocationError
from .files import AttachedFile, load_attached_files
from .focus.base import FocusContext
from .focus.router import FocusModeRouter
from .history import to_chat_turns
from .schemas import ChatRequest, parse_chat_request, parse_suggestions_request
from .store import ChatSessionStore
from .stream import encode_frame
from .suggestions import SuggestionGenerator

LOGGER = logging.getLogger(__name__)


def mint_message_id() -> str:
    return secrets.token_hex(7)


@dataclass(slots=True)
class _TurnLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    holders: int = 0


class ChatService:
    """Drive a chat request from the raw body to a stream of NDJSON frames.

    Guests (``user_id is None``) never touch the store. For signed-in callers
    the user's message is stored before the answer starts, and a second
    subscriber of the event bus stores sources and the final answer while
    the first one feeds the HTTP response.
    """

    def __init__(
        self,
        *,
        store: ChatSessionStore,
        focus_router: FocusModeRouter,
        model_registry: ModelRegistry,
        suggestion_generator: SuggestionGenerator,
        settings: Settings,
    ) -> None:
        self.store = store
        self.focus_router = focus_router
        self.model_registry = model_registry
        self.suggestion_generator = suggestion_generator
        self.settings = settings
        self._background: set[asyncio.Task[Any]] = set()
        self._turn_locks: dict[tuple[str, str], _TurnLock] = {}

    async def start_chat(self, body: Any, user_id: str | None) -> AsyncGenerator[bytes, None]:
        request = parse_chat_request(body)
        handler = self.focus_router.resolve(request.focus_mode)
        llm = self.model_registry.load_chat_model(request.chat_model.provider_id, request.chat_model.key)
        chat_id = request.message.chat_id

        persist = False
        async with self._turn_lock(chat_id, user_id):
            files = await asyncio.to_thread(load_attached_files, self.settings.storage.upload_dir, request.files)
            if user_id is not None:
                persist = await self._save_user_turn(request, user_id, files)

        assistant_message_id = mint_message_id()
        bus = AnswerEventBus(name=chat_id)
        network = bus.subscribe("network")
        if persist:
            persistence = bus.subscribe("persistence")
            self._track(
                asyncio.create_task(
                    self._persist(persistence, request, user_id, assistant_message_id, llm),
                    name=f"chat-persistence-{chat_id}",
                )
            )

        context = FocusContext(
            query=request.message.content,
            llm=llm,
            optimization_mode=request.optimization_mode,
            history=to_chat_turns(request.history),
            files=files,
            system_instructions=request.system_instructions,
            chat_id=chat_id,
        )
        LOGGER.info(
            "Chat stream started | chat=%s user=%s focus_mode=%s optimization=%s history=%d files=%d",
            chat_id,
            user_id or "guest",
            request.focus_mode,
            request.optimization_mode,
            len(request.history),
            len(files),
        )
        producer = bus.start(handler.search_and_answer(context))
        self._track(producer)
        return self._forward(network, chat_id, assistant_message_id, None if persist else producer)

    async def suggest(self, body: Any) -> list[str]:
        request = parse_suggestions_request(body)
        llm = self.model_registry.load_chat_model(request.chat_model.provider_id, request.chat_model.key)
        try:
            return await self.suggestion_generator.generate(llm, to_chat_turns(request.chat_history))
        except RuntimeError as exc:
            LOGGER.exception("Suggestion generation failed", exc_info=exc)
            raise ModelInvocationError("An error occurred while generating suggestions") from exc

    async def list_chats(self, user_id: str) -> list[Chat]:
        return await self.store.list_chats(user_id)

    async def get_chat(self, chat_id: str, user_id: str) -> tuple[Chat, list[Message]]:
        return await self.store.get_chat_with_messages(chat_id, user_id)

    async def delete_chat(self, chat_id: str, user_id: str) -> None:
        await self.store.delete_chat(chat_id, user_id)

    async def wait_for_background(self) -> None:
        """Wait for producers and persistence writers still running."""

        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    @asynccontextmanager
    async def _turn_lock(self, chat_id: str, user_id: str | None) -> AsyncIterator[None]:
        """Serialize the user-turn writes of one owner's chat in arrival order."""

        if user_id is None:
            yield
            return
        key = (user_id, chat_id)
        entry = self._turn_locks.get(key)
        if entry is None:
            entry = self._turn_locks[key] = _TurnLock()
        entry.holders += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.holders -= 1
            if not entry.holders:
                del self._turn_locks[key]

    def _track(self, task: asyncio.Task[Any]) -> None:
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _save_user_turn(self, request: ChatRequest, user_id: str, files: list[AttachedFile]) -> bool:
        try:
            await self.store.save_user_turn(
                chat_id=request.message.chat_id,
                user_id=user_id,
                message_id=request.message.message_id,
                content=request.message.content,
                focus_mode=request.focus_mode,
                files=[attached.as_detail() for attached in files],
            )
        except PersistenceError as exc:
            LOGGER.error(
                "User message not persisted; answer will not be stored | chat=%s error=%s",
                request.message.chat_id,
                exc.cause,
            )
            return False
        return True

    async def _forward(
        self,
        subscription: EventSubscription,
        chat_id: str,
        assistant_message_id: str,
        producer: asyncio.Task[None] | None = None,
    ) -> AsyncGenerator[bytes, None]:
        stream_start = perf_counter()
        frames = 0
        last_type = None
        try:
            async for event in subscription:
                frames += 1
                last_type = event.type
                yield encode_frame(event.as_frame(assistant_message_id))
        finally:
            subscription.detach()
            if producer is not None and not subscription.finished and not producer.done():
                LOGGER.info("Client left before the answer ended; stopping producer | chat=%s", chat_id)
                producer.cancel()
            LOGGER.info(
                "Chat stream finished | chat=%s message=%s frames=%d last=%s duration=%.2fs",
                chat_id,
                assistant_message_id,
                frames,
                last_type,
                perf_counter() - stream_start,
            )

    async def _persist(
        self,
        subscription: EventSubscription,
        request: ChatRequest,
        user_id: str,
        assistant_message_id: str,
        llm: LLMClient,
    ) -> None:
        chat_id = request.message.chat_id
        buffer: list[str] = []
        async for event in subscription:
            if event.type == "response":
                buffer.append(event.data)
            elif event.type == "sources":
                if event.data:
                    await self._append(
                        chat_id=chat_id,
                        user_id=user_id,
                        message_id=assistant_message_id,
                        role="source",
                        sources=event.data,
                    )
            elif event.type == "messageEnd":
                answer = "".join(buffer)
                await self._append(
                    chat_id=chat_id,
                    user_id=user_id,
                    message_id=assistant_message_id,
                    role="assistant",
                    content=answer,
                )
                await self._finalize(request, user_id, assistant_message_id, answer, llm)
            else:
                LOGGER.warning(
                    "Answer failed; partial response not persisted | chat=%s message=%s chunks=%d",
                    chat_id,
                    assistant_message_id,
                    len(buffer),
                )

    async def _append(self, **fields: Any) -> None:
        try:
            ordinal = await self.store.append_message(**fields)
        except PersistenceError as exc:
            LOGGER.error(
                "Chat message not persisted | chat=%s role=%s error=%s",
                fields.get("chat_id"),
                fields.get("role"),
                exc.cause,
            )
            return
        LOGGER.debug(
            "Chat message persisted | chat=%s role=%s ordinal=%d",
            fields.get("chat_id"),
            fields.get("role"),
            ordinal,
        )

    async def _finalize(
        self,
        request: ChatRequest,
        user_id: str,
        assistant_message_id: str,
        answer: str,
        llm: LLMClient,
    ) -> None:
        if not self.settings.chat.suggestions_enabled:
            return
        chat_id = request.message.chat_id
        try:
            state = await self.store.turn_state(chat_id, assistant_message_id)
            if not state.source_count or state.has_suggestions:
                return
            history = to_chat_turns(request.history)
            history.append(ChatTurn(role="user", content=request.message.content))
            history.append(ChatTurn(role="assistant", content=answer))
            suggestions = await self.suggestion_generator.generate(llm, history)
        except Exception as exc:  # noqa: BLE001
            LOGGER.warning("Suggestions skipped | chat=%s error=%s", chat_id, exc)
            return
        if suggestions:
            await self._append(
                chat_id=chat_id,
                user_id=user_id,
                message_id=assistant_message_id,
                role="suggestion",
                suggestions=suggestions,
            )


__all__ = ["ChatService", "mint_message_id"]
