"""Shared exception hierarchy for the qwksearch services."""
from __future__ import annotations

from typing import Any, Optional


class PlatformError(Exception):
    """Base exception for domain specific failures.

    ``status_code`` and ``message`` are what the HTTP layer reports when the
    error escapes a request handler.
    """

    status_code: int = 500
    default_message: str = "An error has occurred."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def payload(self) -> dict[str, Any]:
        return {"message": self.message}


class RepositoryError(PlatformError):
    """Raised when data access fails."""

    def __init__(self, message: str | None = None, *, cause: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.cause = cause


class PersistenceError(RepositoryError):
    """Raised when a chat store write or read could not be completed."""

    default_message = "Failed to persist chat state."


class NotFoundError(RepositoryError):
    """Raised when an entity could not be located."""

    status_code = 404
    default_message = "Not found"


class ServiceError(PlatformError):
    """Raised when a service level operation fails."""


__all__ = ["PlatformError", "RepositoryError", "PersistenceError", "NotFoundError", "ServiceError"]
