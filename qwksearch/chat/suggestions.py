"""Follow-up question generation."""
from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from time import perf_counter

from ..infrastructure.llm.base import ChatTurn, LLMClient
from .history import render_transcript
from .prompts import SUGGESTIONS_PROMPT

LOGGER = logging.getLogger(__name__)

SUGGESTIONS_BLOCK_RE = re.compile(r"<suggestions>(.*?)</suggestions>", re.DOTALL | re.IGNORECASE)
LIST_MARKER_RE = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s*")

MAX_SUGGESTIONS = 5


def parse_suggestions(text: str) -> list[str]:
    """Extract one suggestion per line from a ``<suggestions>`` block."""

    match = SUGGESTIONS_BLOCK_RE.search(text or "")
    block = match.group(1) if match else (text or "")
    suggestions: list[str] = []
    for line in block.splitlines():
        cleaned = LIST_MARKER_RE.sub("", line).strip()
        if cleaned and cleaned not in suggestions:
            suggestions.append(cleaned)
    return suggestions[:MAX_SUGGESTIONS]


class SuggestionGenerator:
    """Ask a chat model for follow-up questions about a conversation."""

    async def generate(self, llm: LLMClient, history: Sequence[ChatTurn]) -> list[str]:
        if not history:
            return []
        start = perf_counter()
        prompt = SUGGESTIONS_PROMPT.format(conversation=render_transcript(history))
        raw = await llm.complete(prompt)
        suggestions = parse_suggestions(raw)
        LOGGER.info(
            "Suggestions generated | model=%s turns=%d suggestions=%d duration=%.3fs",
            getattr(llm, "model", "unknown"),
            len(history),
            len(suggestions),
            perf_counter() - start,
        )
        return suggestions


__all__ = ["MAX_SUGGESTIONS", "SuggestionGenerator", "parse_suggestions"]
