"""LLM client exports."""

from .base import ChatTurn, LLMClient
from .exceptions import UnknownModelError
from .ollama import OllamaClient
from .registry import ModelRegistry
from .vllm import VLLMClient

__all__ = ["ChatTurn", "LLMClient", "ModelRegistry", "OllamaClient", "UnknownModelError", "VLLMClient"]
