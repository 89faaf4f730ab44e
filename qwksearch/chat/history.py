"""Conversion of client-held history pairs into model turns."""
from __future__ import annotations

from collections.abc import Iterable, Sequence

from ..infrastructure.llm.base import ChatTurn
from .constants import USER_HISTORY_ROLES


def to_chat_turns(pairs: Iterable[Sequence[str]]) -> list[ChatTurn]:
    turns: list[ChatTurn] = []
    for role, content in pairs:
        mapped = "user" if role.lower() in USER_HISTORY_ROLES else "assistant"
        turns.append(ChatTurn(role=mapped, content=content))
    return turns


def render_transcript(turns: Iterable[ChatTurn]) -> str:
    return "\n".join(f"{turn.role}: {turn.content}" for turn in turns)


__all__ = ["render_transcript", "to_chat_turns"]
