"""Chat specific exceptions."""
from __future__ import annotations

from typing import Any

from ..exceptions import NotFoundError, ServiceError


class ChatError(ServiceError):
    """Base class for chat failures."""


class InvalidRequestError(ChatError):
    """Raised when a chat request body does not match the expected schema."""

    status_code = 400
    default_message = "Invalid request body"

    def __init__(self, message: str | None = None, *, issues: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.issues = issues or []

    def payload(self) -> dict[str, Any]:
        payload = super().payload()
        if self.issues:
            payload["error"] = self.issues
        return payload


class UnknownFocusModeError(ChatError):
    """Raised when no handler is registered for the requested focus mode."""

    status_code = 400
    default_message = "Invalid focus mode"

    def __init__(self, focus_mode: str | None = None) -> None:
        super().__init__()
        self.focus_mode = focus_mode


class ModelInvocationError(ChatError):
    """Raised when the language model fails while an answer is being produced."""

    default_message = "LLM request failed."


class ChatNotFoundError(NotFoundError):
    """Raised when a chat is missing or owned by someone else."""

    default_message = "Chat not found"


__all__ = [
    "ChatError",
    "ChatNotFoundError",
    "InvalidRequestError",
    "ModelInvocationError",
    "UnknownFocusModeError",
]
