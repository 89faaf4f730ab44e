"""Metasearch specific exceptions."""
from __future__ import annotations

from typing import Any

from ..exceptions import ServiceError


class SearchError(ServiceError):
    """Base class for metasearch failures."""

    def payload(self) -> dict[str, Any]:
        return {"error": self.message}


class InvalidSearchQueryError(SearchError):
    """Raised when search parameters cannot form a query."""

    status_code = 400
    default_message = "Query parameter is required"


class BackendUnavailableError(SearchError):
    """Raised when a single search instance could not be queried.

    Recovered inside ``MetasearchClient`` by resampling; never surfaced to
    callers on its own.
    """

    def __init__(self, instance: str, message: str | None = None) -> None:
        super().__init__(message or f"Search backend {instance} is unavailable")
        self.instance = instance


class NoResultsFoundError(SearchError):
    """Raised when every attempt, including the public fallback, came back empty."""

    status_code = 500
    default_message = "No results found"


__all__ = ["SearchError", "InvalidSearchQueryError", "BackendUnavailableError", "NoResultsFoundError"]
