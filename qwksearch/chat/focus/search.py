"""Focus modes that answer from metasearch results."""
from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from time import perf_counter

from ...search.exceptions import SearchError
from ...search.schemas import SearchResult
from ...search.service import SearchService
from ..constants import REPHRASE_NOT_NEEDED, REPHRASE_OPTIMIZATION_MODES
from ..exceptions import ModelInvocationError
from ..prompts import REPHRASE_PROMPT, SEARCH_ANSWER_PROMPT, render_system_prompt
from ..stream import StreamEvent
from .base import FocusContext, FocusModeHandler, file_documents

LOGGER = logging.getLogger(__name__)


class SearchAnswerHandler(FocusModeHandler):
    """Search one category, publish the hits as sources, then stream a cited answer."""

    def __init__(
        self,
        key: str,
        search_service: SearchService,
        *,
        category: str = "general",
        query_prefix: str = "",
        prompt_template: str = SEARCH_ANSWER_PROMPT,
        max_results: int = 10,
        file_context_chars: int = 4000,
    ) -> None:
        self.key = key
        self.search_service = search_service
        self.category = category
        self.query_prefix = query_prefix
        self.prompt_template = prompt_template
        self.max_results = max_results
        self.file_context_chars = file_context_chars

    async def search_and_answer(self, context: FocusContext) -> AsyncGenerator[StreamEvent, None]:
        search_query = context.query
        if context.history and context.optimization_mode in REPHRASE_OPTIMIZATION_MODES:
            search_query = await self._rephrase(context)

        results: list[SearchResult] = []
        if search_query.lower() != REPHRASE_NOT_NEEDED:
            results = await self._search(f"{self.query_prefix}{search_query}", context)
        else:
            LOGGER.info("%s: search skipped after rephrase | chat=%s", self.key, context.chat_id)

        if results:
            yield StreamEvent.sources([result.as_dict() for result in results])

        documents = [
            f"[{index}] {result.title}\nURL: {result.url}\n{result.snippet}"
            for index, result in enumerate(results, start=1)
        ]
        documents.extend(file_documents(context.files, self.file_context_chars))
        system_prompt = render_system_prompt(self.prompt_template, context.system_instructions)
        async for event in self._stream_answer(context, documents=documents, system_prompt=system_prompt):
            yield event
        yield StreamEvent.message_end()

    async def _rephrase(self, context: FocusContext) -> str:
        try:
            rephrased = await context.llm.complete(
                context.query,
                history=context.history,
                system_prompt=REPHRASE_PROMPT,
            )
        except RuntimeError as exc:
            raise ModelInvocationError(str(exc) or None) from exc
        rephrased = rephrased.strip().strip("\"'`").strip()
        LOGGER.info(
            "%s: query rephrased | chat=%s original=%r rephrased=%r",
            self.key,
            context.chat_id,
            context.query,
            rephrased,
        )
        return rephrased or context.query

    async def _search(self, text: str, context: FocusContext) -> list[SearchResult]:
        search_start = perf_counter()
        try:
            query = self.search_service.build_query(text, category=self.category)
            response = await self.search_service.search(query)
        except SearchError as exc:
            LOGGER.warning("%s: search failed | chat=%s error=%s", self.key, context.chat_id, exc)
            return []
        results = response.results[: self.max_results]
        LOGGER.info(
            "%s: search finished | chat=%s category=%s results=%d duration=%.3fs",
            self.key,
            context.chat_id,
            self.category,
            len(results),
            perf_counter() - search_start,
        )
        return results


__all__ = ["SearchAnswerHandler"]
