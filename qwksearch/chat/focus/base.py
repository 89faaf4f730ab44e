"""Focus-mode handler interface."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator, Sequence
from dataclasses import dataclass, field
from time import perf_counter

from ...infrastructure.llm.base import ChatTurn, LLMClient
from ..exceptions import ModelInvocationError
from ..files import AttachedFile
from ..stream import StreamEvent

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class FocusContext:
    """Everything a handler needs to answer one message."""

    query: str
    llm: LLMClient
    optimization_mode: str = "speed"
    history: list[ChatTurn] = field(default_factory=list)
    files: list[AttachedFile] = field(default_factory=list)
    system_instructions: str | None = None
    chat_id: str | None = None


class FocusModeHandler(ABC):
    """Produce the answer events for one focus mode."""

    key: str

    @abstractmethod
    async def search_and_answer(self, context: FocusContext) -> AsyncGenerator[StreamEvent, None]:
        """Return a streaming generator of answer events ending with ``messageEnd``."""

    async def _stream_answer(
        self,
        context: FocusContext,
        *,
        documents: Sequence[str] | None,
        system_prompt: str,
    ) -> AsyncGenerator[StreamEvent, None]:
        LOGGER.info(
            "%s: starting generation | chat=%s documents=%d",
            self.__class__.__name__,
            context.chat_id,
            len(documents or []),
        )
        generation_start = perf_counter()
        chunk_count = 0
        try:
            async for piece in context.llm.generate(
                context.query,
                context=documents or None,
                history=context.history,
                system_prompt=system_prompt,
            ):
                if piece:
                    chunk_count += 1
                    yield StreamEvent.response(piece)
        except RuntimeError as exc:
            raise ModelInvocationError(str(exc) or None) from exc
        LOGGER.info(
            "%s: generation finished | chat=%s duration=%.3fs chunks=%d",
            self.__class__.__name__,
            context.chat_id,
            perf_counter() - generation_start,
            chunk_count,
        )


def file_documents(files: Sequence[AttachedFile], max_chars: int) -> list[str]:
    documents: list[str] = []
    for attached in files:
        block = attached.context_block(max_chars)
        if block:
            documents.append(block)
    return documents


__all__ = ["FocusContext", "FocusModeHandler", "file_documents"]
