"""Schemas for chat endpoints."""
from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import InvalidRequestError

OptimizationMode = Literal["speed", "balanced", "quality"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ChatMessagePayload(_CamelModel):
    message_id: str = Field(alias="messageId", min_length=1)
    chat_id: str = Field(alias="chatId", min_length=1, max_length=64)
    content: str = Field(min_length=1)


class ChatModelRef(_CamelModel):
    provider_id: str = Field(alias="providerId", min_length=1)
    key: str = Field(min_length=1)


class ChatRequest(_CamelModel):
    message: ChatMessagePayload
    optimization_mode: OptimizationMode = Field(alias="optimizationMode")
    focus_mode: str = Field(alias="focusMode", min_length=1)
    history: list[tuple[str, str]] = Field(default_factory=list)
    files: list[str] = Field(default_factory=list)
    chat_model: ChatModelRef = Field(alias="chatModel")
    system_instructions: Optional[str] = Field(default=None, alias="systemInstructions")


class SuggestionsRequest(_CamelModel):
    chat_history: list[tuple[str, str]] = Field(alias="chatHistory", default_factory=list)
    chat_model: ChatModelRef = Field(alias="chatModel")


def _issues(exc: ValidationError) -> list[dict[str, Any]]:
    return [
        {"path": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
        for error in exc.errors()
    ]


def parse_chat_request(body: Any) -> ChatRequest:
    """Validate a raw JSON body, raising ``InvalidRequestError`` with per-field issues."""

    try:
        return ChatRequest.model_validate(body)
    except ValidationError as exc:
        raise InvalidRequestError("Invalid request body", issues=_issues(exc)) from exc


def parse_suggestions_request(body: Any) -> SuggestionsRequest:
    try:
        return SuggestionsRequest.model_validate(body)
    except ValidationError as exc:
        raise InvalidRequestError("Invalid request body", issues=_issues(exc)) from exc


__all__ = [
    "ChatMessagePayload",
    "ChatModelRef",
    "ChatRequest",
    "OptimizationMode",
    "SuggestionsRequest",
    "parse_chat_request",
    "parse_suggestions_request",
]
