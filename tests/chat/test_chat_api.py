"""Chat endpoint tests: validation, guest and signed-in flows."""
from __future__ import annotations

import asyncio
import json

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select

from qwksearch.infrastructure.database import Chat, Message


async def _messages(session_factory, chat_id: str) -> list[Message]:
    async with session_factory() as session:
        result = await session.execute(select(Message).where(Message.chat_id == chat_id).order_by(Message.id))
        return list(result.scalars())


def test_guest_chat_streams_frames_without_persistence(
    app: FastAPI, chat_harness, chat_body, frames, session_factory, monkeypatch: pytest.MonkeyPatch
) -> None:
    writes: list[str] = []

    async def _record(*args, **kwargs):
        writes.append(kwargs.get("role", "user"))

    monkeypatch.setattr(chat_harness.service.store, "save_user_turn", _record)
    monkeypatch.setattr(chat_harness.service.store, "append_message", _record)

    async def _run() -> None:
        async with app.router.lifespan_context(app):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://testserver") as client:
                response = await client.post("/api/chat", json=chat_body())
                assert response.status_code == 200
                assert response.headers["content-type"].startswith("application/x-ndjson")
                received = frames(response.text)
                await chat_harness.service.wait_for_background()

                assert [frame["type"] for frame in received] == [
                    "sources",
                    "message",
                    "message",
                    "message",
                    "messageEnd",
                ]
                message_ids = {frame["messageId"] for frame in received if "messageId" in frame}
                assert len(message_ids) == 1
                assert received[0]["data"][0]["url"] == "https://en.wikipedia.org/wiki/Paris"
                assert "".join(frame["data"] for frame in received if frame["type"] == "message") == (
                    "Paris is the capital of France [1]."
                )

        async with session_factory() as session:
            chats = (await session.execute(select(Chat))).scalars().all()
            assert chats == []

    asyncio.run(_run())
    assert writes == []
    assert chat_harness.search.queries == ["What is the capital of France?"]


def test_unknown_focus_mode_is_rejected_before_streaming(
    app: FastAPI, chat_harness, chat_body, login_user, session_factory
) -> None:
    async def _run() -> None:
        async with app.router.lifespan_context(app):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://testserver") as client:
                headers = await login_user(client, "dora@example.com")
                response = await client.post(
                    "/api/chat", json=chat_body(focus_mode="doesNotExist"), headers=headers
                )
                assert response.status_code == 400
                assert response.json()["message"] == "Invalid focus mode"
                await chat_harness.service.wait_for_background()

        assert await _messages(session_factory, "chat-1") == []

    asyncio.run(_run())
    assert chat_harness.model.requests == []
    assert chat_harness.search.queries == []


def test_invalid_bodies_return_structured_issues(app: FastAPI, chat_harness, chat_body) -> None:
    async def _run() -> None:
        async with app.router.lifespan_context(app):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://testserver") as client:
                body = chat_body()
                body["optimizationMode"] = "turbo"
                del body["message"]["content"]
                response = await client.post("/api/chat", json=body)
                assert response.status_code == 400
                payload = response.json()
                assert payload["message"] == "Invalid request body"
                paths = {issue["path"] for issue in payload["error"]}
                assert {"message.content", "optimizationMode"} <= paths

                malformed = await client.post(
                    "/api/chat", content=b"{not json", headers={"Content-Type": "application/json"}
                )
                assert malformed.status_code == 400

                body = chat_body()
                body["chatModel"] = {"providerId": "unknown", "key": "x"}
                unknown_model = await client.post("/api/chat", json=body)
                assert unknown_model.status_code == 400
                assert unknown_model.json() == {"message": "Invalid chat model"}

    asyncio.run(_run())
    assert chat_harness.model.requests == []


def test_signed_in_chat_persists_turn_and_suggestions(
    app: FastAPI, chat_harness, chat_body, frames, login_user
) -> None:
    async def _run() -> None:
        async with app.router.lifespan_context(app):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://testserver") as client:
                headers = await login_user(client, "erin@example.com")
                response = await client.post("/api/chat", json=chat_body(), headers=headers)
                assert response.status_code == 200
                received = frames(response.text)
                answer_id = received[0]["messageId"]
                await chat_harness.service.wait_for_background()

                listing = await client.get("/api/chats", headers=headers)
                assert listing.status_code == 200
                chats = listing.json()["chats"]
                assert [chat["id"] for chat in chats] == ["chat-1"]
                assert chats[0]["title"] == "What is the capital of France?"
                assert chats[0]["focusMode"] == "webSearch"

                detail = await client.get("/api/chats/chat-1", headers=headers)
                assert detail.status_code == 200
                messages = detail.json()["messages"]
                assert [message["role"] for message in messages] == ["user", "source", "assistant", "suggestion"]
                user, source, assistant, suggestion = messages
                assert user["messageId"] == "msg-1"
                assert source["messageId"] == answer_id
                assert source["sources"][0]["title"] == "Paris"
                assert assistant["messageId"] == answer_id
                assert assistant["content"] == "Paris is the capital of France [1]."
                assert suggestion["suggestions"] == [
                    "How many people live in Paris?",
                    "When did Paris become the capital?",
                ]
                ordinals = [message["id"] for message in messages]
                assert ordinals == sorted(ordinals)

    asyncio.run(_run())


def test_resending_a_message_rewrites_the_rest_of_the_chat(
    app: FastAPI, chat_harness, chat_body, login_user
) -> None:
    def _shape(messages: list[dict]) -> list[tuple]:
        return [
            (message["role"], message["content"], json.dumps(message.get("sources")), message.get("suggestions"))
            for message in messages
        ]

    async def _run() -> None:
        async with app.router.lifespan_context(app):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://testserver") as client:
                headers = await login_user(client, "finn@example.com")

                await client.post("/api/chat", json=chat_body(), headers=headers)
                await chat_harness.service.wait_for_background()
                follow_up = chat_body(
                    "And of Germany?",
                    message_id="msg-2",
                    history=[["human", "What is the capital of France?"], ["assistant", "Paris."]],
                )
                await client.post("/api/chat", json=follow_up, headers=headers)
                await chat_harness.service.wait_for_background()
                before = (await client.get("/api/chats/chat-1", headers=headers)).json()["messages"]
                assert [message["role"] for message in before].count("user") == 2

                rewrite = await client.post("/api/chat", json=chat_body(), headers=headers)
                assert rewrite.status_code == 200
                await chat_harness.service.wait_for_background()
                rewritten = (await client.get("/api/chats/chat-1", headers=headers)).json()["messages"]

                await client.post("/api/chat", json=chat_body(chat_id="chat-2", message_id="fresh-1"), headers=headers)
                await chat_harness.service.wait_for_background()
                fresh = (await client.get("/api/chats/chat-2", headers=headers)).json()["messages"]

                assert _shape(rewritten) == _shape(fresh)
                assert [message["messageId"] for message in rewritten if message["role"] == "user"] == ["msg-1"]

    asyncio.run(_run())


def test_model_failure_ends_stream_with_error_event(
    app: FastAPI, chat_harness, chat_body, frames, login_user, session_factory
) -> None:
    chat_harness.model.fail = True

    async def _run() -> None:
        async with app.router.lifespan_context(app):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://testserver") as client:
                headers = await login_user(client, "gail@example.com")
                response = await client.post("/api/chat", json=chat_body(), headers=headers)
                assert response.status_code == 200
                received = frames(response.text)
                await chat_harness.service.wait_for_background()

        assert [frame["type"] for frame in received] == ["sources", "error"]
        assert "status 500" in received[-1]["data"]
        stored = await _messages(session_factory, "chat-1")
        assert [message.role for message in stored] == ["user", "source"]

    asyncio.run(_run())


def test_chat_history_is_scoped_to_its_owner(app: FastAPI, chat_harness, chat_body, login_user) -> None:
    async def _run() -> None:
        async with app.router.lifespan_context(app):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://testserver") as client:
                owner = await login_user(client, "hana@example.com")
                intruder = await login_user(client, "ivan@example.com")
                await client.post("/api/chat", json=chat_body(), headers=owner)
                await chat_harness.service.wait_for_background()

                missing = await client.get("/api/chats/nope", headers=owner)
                assert missing.status_code == 404
                assert missing.json() == {"message": "Chat not found"}

                foreign = await client.get("/api/chats/chat-1", headers=intruder)
                assert foreign.status_code == 404
                assert (await client.get("/api/chats", headers=intruder)).json() == {"chats": []}
                assert (await client.delete("/api/chats/chat-1", headers=intruder)).status_code == 404

                hijack = await client.post(
                    "/api/chat", json=chat_body(message_id="msg-x"), headers=intruder
                )
                assert hijack.status_code == 404

                deleted = await client.delete("/api/chats/chat-1", headers=owner)
                assert deleted.status_code == 200
                assert deleted.json() == {"message": "Chat deleted successfully"}
                assert (await client.get("/api/chats/chat-1", headers=owner)).status_code == 404

    asyncio.run(_run())


def test_suggestions_endpoint(app: FastAPI, chat_harness) -> None:
    async def _run() -> None:
        async with app.router.lifespan_context(app):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://testserver") as client:
                response = await client.post(
                    "/api/suggestions",
                    json={
                        "chatHistory": [["human", "What is the capital of France?"], ["assistant", "Paris."]],
                        "chatModel": {"providerId": "ollama", "key": "llama3"},
                    },
                )
                assert response.status_code == 200
                assert response.json() == {
                    "suggestions": ["How many people live in Paris?", "When did Paris become the capital?"]
                }

    asyncio.run(_run())
