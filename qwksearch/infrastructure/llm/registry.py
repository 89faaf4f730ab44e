"""Resolve a chat model from a provider id and model key."""
from __future__ import annotations

import logging
from typing import Callable

import httpx

from ...config import LLMSettings
from .base import LLMClient
from .exceptions import UnknownModelError
from .ollama import OllamaClient
from .vllm import VLLMClient

LOGGER = logging.getLogger(__name__)

ClientFactory = Callable[..., LLMClient]

PROVIDERS: dict[str, ClientFactory] = {
    "ollama": OllamaClient,
    "vllm": VLLMClient,
}


class ModelRegistry:
    """Load an invocable chat model by provider id and model key."""

    def __init__(
        self,
        settings: LLMSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._providers = {
            provider_id: factory
            for provider_id, factory in PROVIDERS.items()
            if provider_id in settings.enabled_providers
        }

    @property
    def provider_ids(self) -> list[str]:
        return sorted(self._providers)

    def load_chat_model(self, provider_id: str | None, key: str | None) -> LLMClient:
        factory = self._providers.get((provider_id or "").lower())
        if factory is None or not key:
            LOGGER.warning("Unknown chat model requested | provider=%s key=%s", provider_id, key)
            raise UnknownModelError()
        return factory(self._settings, key, transport=self._transport)


__all__ = ["ModelRegistry", "PROVIDERS"]
