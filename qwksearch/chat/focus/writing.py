"""Writing assistant focus mode: answers without searching."""
from __future__ import annotations

from collections.abc import AsyncGenerator

from ..prompts import WRITING_ASSISTANT_PROMPT, render_system_prompt
from ..stream import StreamEvent
from .base import FocusContext, FocusModeHandler, file_documents

FILE_SOURCE_URL = "File"


class WritingAssistantHandler(FocusModeHandler):
    """Stream an answer grounded only in the attached files, if any."""

    def __init__(self, key: str, *, file_context_chars: int = 4000) -> None:
        self.key = key
        self.file_context_chars = file_context_chars

    async def search_and_answer(self, context: FocusContext) -> AsyncGenerator[StreamEvent, None]:
        documents = file_documents(context.files, self.file_context_chars)
        if documents:
            yield StreamEvent.sources(
                [
                    {"title": attached.name, "url": FILE_SOURCE_URL, "snippet": attached.contents[:280]}
                    for attached in context.files
                    if attached.contents
                ]
            )
        system_prompt = render_system_prompt(WRITING_ASSISTANT_PROMPT, context.system_instructions)
        async for event in self._stream_answer(context, documents=documents, system_prompt=system_prompt):
            yield event
        yield StreamEvent.message_end()


__all__ = ["WritingAssistantHandler"]
