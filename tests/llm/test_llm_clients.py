"""Streaming LLM client tests."""
from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from qwksearch.config import LLMSettings
from qwksearch.infrastructure.llm.base import ChatTurn, LLMClient
from qwksearch.infrastructure.llm.exceptions import UnknownModelError
from qwksearch.infrastructure.llm.registry import ModelRegistry


async def _collect(client: LLMClient, prompt: str, **kwargs) -> list[str]:
    return [piece async for piece in client.generate(prompt, **kwargs)]


def test_ollama_client_streams_message_content() -> None:
    captured: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(json.loads(request.content))
        lines = [
            json.dumps({"message": {"content": "Hello"}, "done": False}),
            "not json",
            json.dumps({"message": {"content": " world"}, "done": False}),
            json.dumps({"done": True}),
        ]
        return httpx.Response(200, text="\n".join(lines))

    registry = ModelRegistry(LLMSettings(), transport=httpx.MockTransport(handler))
    client = registry.load_chat_model("ollama", "llama3")

    pieces = asyncio.run(
        _collect(
            client,
            "Say hello",
            context=["[1] Greeting"],
            history=[ChatTurn(role="user", content="Hi"), ChatTurn(role="assistant", content="Hey")],
            system_prompt="Be brief.",
        )
    )

    assert pieces == ["Hello", " world"]
    payload = captured[0]
    assert payload["model"] == "llama3"
    assert [message["role"] for message in payload["messages"]] == ["system", "user", "assistant", "user"]
    assert payload["messages"][-1]["content"].startswith("Context:\n[1] Greeting")


def test_vllm_client_parses_server_sent_events() -> None:
    seen_headers: list[httpx.Headers] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen_headers.append(request.headers)
        chunks = [
            {"choices": [{"delta": {"role": "assistant"}}]},
            {"choices": [{"delta": {"content": "Bonjour"}}]},
            {"choices": [{"delta": {"content": " Paris"}}]},
        ]
        body = "\n\n".join(f"data: {json.dumps(chunk)}" for chunk in chunks) + "\n\ndata: [DONE]\n\n"
        return httpx.Response(200, text=body)

    settings = LLMSettings(vllm_api_key="secret")
    client = ModelRegistry(settings, transport=httpx.MockTransport(handler)).load_chat_model("vllm", "mistral")

    assert asyncio.run(client.complete("Greet Paris")) == "Bonjour Paris"
    assert seen_headers[0]["authorization"] == "Bearer secret"


def test_failed_generation_raises_runtime_error() -> None:
    client = ModelRegistry(
        LLMSettings(), transport=httpx.MockTransport(lambda request: httpx.Response(500))
    ).load_chat_model("ollama", "llama3")

    with pytest.raises(RuntimeError, match="status 500"):
        asyncio.run(_collect(client, "Hello"))


def test_unknown_models_are_rejected() -> None:
    registry = ModelRegistry(LLMSettings(enabled_providers=["ollama"]))

    with pytest.raises(UnknownModelError):
        registry.load_chat_model("vllm", "mistral")
    with pytest.raises(UnknownModelError):
        registry.load_chat_model("ollama", "")
    assert registry.provider_ids == ["ollama"]
