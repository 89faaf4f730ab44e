"""vLLM client streaming via OpenAI compatible REST API."""
from __future__ import annotations

import json
import logging
from collections.abc import AsyncGenerator, Sequence
from time import perf_counter

import httpx

from ...config import LLMSettings
from .base import ChatTurn, LLMClient

LOGGER = logging.getLogger(__name__)


class VLLMClient(LLMClient):
    """Interact with a vLLM (or any OpenAI-compatible) chat completions server."""

    def __init__(
        self,
        settings: LLMSettings,
        model: str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._host = settings.vllm_host.rstrip("/")
        self._api_key = settings.vllm_api_key
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
        """Generate a streamed completion from vLLM."""

        payload = {
            "model": self.model,
            "messages": self.build_messages(prompt, context=context, history=history, system_prompt=system_prompt),
            "stream": True,
            "temperature": self._temperature,
        }
        headers = {"Authorization": f"Bearer {self._api_key}"} if self._api_key else None
        url = f"{self._host}/v1/chat/completions"
        timeout = httpx.Timeout(self._timeout, connect=self._timeout, read=None, write=self._timeout)
        LOGGER.info(
            "vLLM request started | model=%s context_items=%d history=%d prompt_chars=%d",
            self.model,
            len(context or []),
            len(history or []),
            len(prompt),
        )
        start_time = perf_counter()
        chunk_count = 0
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                async with client.stream("POST", url, json=payload, headers=headers) as response:
                    response.raise_for_status()
                    async for line in response.aiter_lines():
                        if not line:
                            continue
                        chunk = self._parse_line(line)
                        if chunk:
                            chunk_count += 1
                            yield chunk
        except httpx.HTTPStatusError as exc:
            raise RuntimeError(f"vLLM generation failed with status {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise RuntimeError(f"Failed to reach vLLM server at {url}: {exc}") from exc
        finally:
            LOGGER.info(
                "vLLM request finished | model=%s duration=%.2fs chunks=%d",
                self.model,
                perf_counter() - start_time,
                chunk_count,
            )

    @staticmethod
    def _parse_line(line: str) -> str:
        prefix = "data:"
        if not line.startswith(prefix):
            return ""
        data = line[len(prefix) :].strip()
        if not data or data == "[DONE]":
            return ""
        try:
            payload = json.loads(data)
        except json.JSONDecodeError:
            return ""
        choices = payload.get("choices") or []
        if not choices:
            return ""
        delta = (choices[0] or {}).get("delta") or {}
        text = delta.get("content")
        return str(text) if text else ""


__all__ = ["VLLMClient"]
