from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import json
from typing import Any

import httpx
import pytest
from fastapi import FastAPI

from qwksearch.chat.dependencies import build_chat_service
from qwksearch.chat.prompts import REPHRASE_PROMPT
from qwksearch.chat.service import ChatService
from qwksearch.config import Settings
from qwksearch.search.dependencies import build_search_service

ANSWER_CHUNKS = ["Paris is ", "the capital ", "of France [1]."]
SUGGESTIONS_REPLY = "<suggestions>\n1. How many people live in Paris?\n2. When did Paris become the capital?\n</suggestions>"
SEARCH_RESULTS = {
    "results": [
        {
            "url": "https://en.wikipedia.org/wiki/Paris",
            "title": "Paris",
            "content": "Paris is the capital and largest city of France.",
            "score": 2.5,
        }
    ]
}


class ScriptedModel:
    """Ollama-compatible mock answering chat, rephrase and suggestion prompts."""

    def __init__(self) -> None:
        self.requests: list[dict[str, Any]] = []
        self.answer = list(ANSWER_CHUNKS)
        self.rephrase = "capital of France"
        self.suggestions = SUGGESTIONS_REPLY
        self.fail = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.requests.append(payload)
        if self.fail:
            return httpx.Response(500, text="model crashed")
        messages = payload["messages"]
        if messages[0]["content"] == REPHRASE_PROMPT:
            chunks = [self.rephrase]
        elif "<suggestions>" in messages[-1]["content"]:
            chunks = [self.suggestions]
        else:
            chunks = self.answer
        lines = [json.dumps({"message": {"role": "assistant", "content": chunk}}) for chunk in chunks]
        return httpx.Response(200, text="\n".join(lines))

    @property
    def answer_requests(self) -> list[dict[str, Any]]:
        return [
            request
            for request in self.requests
            if request["messages"][0]["content"] != REPHRASE_PROMPT
            and "<suggestions>" not in request["messages"][-1]["content"]
        ]


class SearchBackend:
    """JSON deployment mock recording every query."""

    def __init__(self) -> None:
        self.queries: list[str] = []
        self.payload = SEARCH_RESULTS

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.queries.append(request.url.params.get("q", ""))
        return httpx.Response(200, text=json.dumps(self.payload))


@dataclass
class ChatHarness:
    service: ChatService
    model: ScriptedModel
    search: SearchBackend


@pytest.fixture
def chat_harness(app: FastAPI, settings: Settings, session_factory) -> ChatHarness:
    """Install a chat service whose model and search backends are mocked."""

    model = ScriptedModel()
    search = SearchBackend()
    settings.search.public_instances = []
    search_service = build_search_service(settings.search, transport=httpx.MockTransport(search))
    service = build_chat_service(
        settings,
        session_factory,
        search_service,
        llm_transport=httpx.MockTransport(model),
    )
    app.state.chat_service = service
    return ChatHarness(service=service, model=model, search=search)


@pytest.fixture
def chat_body() -> Callable[..., dict[str, Any]]:
    """Return a builder for chat request bodies."""

    def _build(
        content: str = "What is the capital of France?",
        *,
        chat_id: str = "chat-1",
        message_id: str = "msg-1",
        focus_mode: str = "webSearch",
        optimization_mode: str = "speed",
        history: list[list[str]] | None = None,
        files: list[str] | None = None,
    ) -> dict[str, Any]:
        return {
            "message": {"messageId": message_id, "chatId": chat_id, "content": content},
            "optimizationMode": optimization_mode,
            "focusMode": focus_mode,
            "history": history or [],
            "files": files or [],
            "chatModel": {"providerId": "ollama", "key": "llama3"},
            "systemInstructions": "",
        }

    return _build


def parse_frames(body: str) -> list[dict[str, Any]]:
    return [json.loads(line) for line in body.splitlines() if line.strip()]


@pytest.fixture
def frames() -> Callable[[str], list[dict[str, Any]]]:
    return parse_frames
