"""Chat endpoints."""
from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from ..auth.dependencies import require_identity, resolve_identity
from ..exceptions import PlatformError, ServiceError
from .constants import CHAT_DELETED_MESSAGE, CHAT_FAILURE_MESSAGE
from .dependencies import get_chat_service
from .exceptions import InvalidRequestError
from .service import ChatService

LOGGER = logging.getLogger(__name__)

router = APIRouter()


async def _read_json(request: Request) -> Any:
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidRequestError("Request body must be valid JSON") from exc


@router.post("/chat", response_class=StreamingResponse)
async def send_message(
    request: Request,
    user_id: str | None = Depends(resolve_identity),
    service: ChatService = Depends(get_chat_service),
) -> StreamingResponse:
    body = await _read_json(request)
    try:
        stream = await service.start_chat(body, user_id)
    except PlatformError:
        raise
    except Exception as exc:
        LOGGER.exception("Chat request failed before streaming", exc_info=exc)
        raise ServiceError(CHAT_FAILURE_MESSAGE) from exc
    return StreamingResponse(
        stream,
        media_type="application/x-ndjson",
        headers={"Cache-Control": "no-store", "Content-Encoding": "identity", "X-Accel-Buffering": "no"},
    )


@router.get("/chats")
async def list_chats(
    user_id: str = Depends(require_identity),
    service: ChatService = Depends(get_chat_service),
) -> dict[str, Any]:
    chats = await service.list_chats(user_id)
    return {"chats": [chat.as_dict() for chat in chats]}


@router.get("/chats/{chat_id}")
async def get_chat(
    chat_id: str,
    user_id: str = Depends(require_identity),
    service: ChatService = Depends(get_chat_service),
) -> dict[str, Any]:
    chat, messages = await service.get_chat(chat_id, user_id)
    return {"chat": chat.as_dict(), "messages": [message.as_dict() for message in messages]}


@router.delete("/chats/{chat_id}")
async def delete_chat(
    chat_id: str,
    user_id: str = Depends(require_identity),
    service: ChatService = Depends(get_chat_service),
) -> dict[str, str]:
    await service.delete_chat(chat_id, user_id)
    return {"message": CHAT_DELETED_MESSAGE}


@router.post("/suggestions")
async def generate_suggestions(
    request: Request,
    service: ChatService = Depends(get_chat_service),
) -> dict[str, list[str]]:
    body = await _read_json(request)
    return {"suggestions": await service.suggest(body)}


__all__ = ["router"]
