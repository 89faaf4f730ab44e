"""Ollama backed LLM client with streaming responses."""
from __future__ import annotations

import json
import logging
from collections.abc import AsyncGenerator, Sequence
from time import perf_counter
from typing import Any

import httpx

from ...config import LLMSettings
from .base import ChatTurn, LLMClient

LOGGER = logging.getLogger(__name__)


class OllamaClient(LLMClient):
    """Stream chat completions from an Ollama server."""

    def __init__(
        self,
        settings: LLMSettings,
        model: str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._host = settings.ollama_host.rstrip("/")
        self._timeout = settings.request_timeout
        self._temperature = settings.temperature
        self._transport = transport
        self.model = model

    async def generate(
        self,
        prompt: str,
        *,
        context: Sequence[str] | None = None,
        history: Sequence[ChatTurn] | None = None,
        system_prompt: str | None = None,
    ) -> AsyncGenerator[str, None]:
        """Generate a completion using the selected Ollama model."""

        payload = {
            "model": self.model,
            "messages": self.build_messages(prompt, context=context, history=history, system_prompt=system_prompt),
            "stream": True,
            "options": {"temperature": self._temperature},
        }
        url = f"{self._host}/api/chat"
        timeout = httpx.Timeout(self._timeout, connect=self._timeout, read=None, write=self._timeout)
        LOGGER.info(
            "Ollama request started | model=%s context_items=%d history=%d prompt_chars=%d",
            self.model,
            len(context or []),
            len(history or []),
            len(prompt),
        )
        start_time = perf_counter()
        chunk_count = 0
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                async with client.stream("POST", url, json=payload) as response:
                    response.raise_for_status()
                    async for line in response.aiter_lines():
                        if not line:
                            continue
                        chunk = self._parse_chunk(line)
                        if chunk:
                            chunk_count += 1
                            yield chunk
        except httpx.HTTPStatusError as exc:
            raise RuntimeError(f"Ollama generation failed with status {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise RuntimeError(f"Failed to reach Ollama server at {url}: {exc}") from exc
        finally:
            LOGGER.info(
                "Ollama request finished | model=%s duration=%.2fs chunks=%d",
                self.model,
                perf_counter() - start_time,
                chunk_count,
            )

    @staticmethod
    def _parse_chunk(payload: str) -> str:
        try:
            data: dict[str, Any] = json.loads(payload)
        except json.JSONDecodeError:
            return ""
        message = data.get("message") or {}
        chunk = message.get("content") if isinstance(message, dict) else None
        return str(chunk) if chunk else ""


__all__ = ["OllamaClient"]
