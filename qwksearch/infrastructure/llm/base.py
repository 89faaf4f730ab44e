"""LLM client base classes."""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator, Sequence
from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True, slots=True)
class ChatTurn:
    """One prior exchange handed to the model as conversation history."""

    role: Literal["user", "assistant"]
    content: str


class LLMClient(ABC):
    """Abstract LLM interface supporting streaming responses."""

    model: str

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        *,
        context: Sequence[str] | None = None,
        history: Sequence[ChatTurn] | None = None,
        system_prompt: str | None = None,
    ) -> AsyncGenerator[str, None]:
        """Yield response chunks for the given prompt."""

    async def complete(
        self,
        prompt: str,
        *,
        context: Sequence[str] | None = None,
        history: Sequence[ChatTurn] | None = None,
        system_prompt: str | None = None,
    ) -> str:
        """Return the whole completion as one string."""

        pieces: list[str] = []
        async for piece in self.generate(prompt, context=context, history=history, system_prompt=system_prompt):
            pieces.append(piece)
        return "".join(pieces).strip()

    @staticmethod
    def build_messages(
        prompt: str,
        *,
        context: Sequence[str] | None = None,
        history: Sequence[ChatTurn] | None = None,
        system_prompt: str | None = None,
    ) -> list[dict[str, str]]:
        messages: list[dict[str, str]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        for turn in history or ():
            messages.append({"role": turn.role, "content": turn.content})
        if context:
            context_block = "\n\n".join(context)
            prompt = f"Context:\n{context_block}\n\nQuestion:\n{prompt}"
        messages.append({"role": "user", "content": prompt})
        return messages


__all__ = ["ChatTurn", "LLMClient"]
