"""Data shapes shared by the metasearch layer."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .constants import CATEGORY_LIST, DEFAULT_CATEGORY, DEFAULT_LANGUAGE, RECENCY_ALLOWED_LIST
from .exceptions import InvalidSearchQueryError


def sanitize_recency(value: str | None) -> str | None:
    """Return ``value`` when it is an allowed recency window, ``None`` otherwise."""

    if value and value in RECENCY_ALLOWED_LIST:
        return value
    return None


def resolve_category(value: str | int | None) -> str:
    """Map a category name or list index onto a known category."""

    if value is None or value == "":
        return DEFAULT_CATEGORY
    if isinstance(value, int) or (isinstance(value, str) and value.isdigit()):
        index = int(value)
        if 0 <= index < len(CATEGORY_LIST):
            return CATEGORY_LIST[index]
        raise InvalidSearchQueryError(f"Unknown category index {index}")
    if value not in CATEGORY_LIST:
        raise InvalidSearchQueryError(f"Unknown category '{value}'")
    return value


@dataclass(frozen=True, slots=True)
class SearchQuery:
    """Immutable description of one metasearch request.

    ``instance`` pins a backend (the authoritative JSON deployment); ``None``
    lets the instance pool choose.
    """

    text: str
    category: str = DEFAULT_CATEGORY
    recency: str | None = None
    safesearch: bool = False
    language: str = DEFAULT_LANGUAGE
    page: int = 1
    instance: str | None = None

    def __post_init__(self) -> None:
        if not self.text or not self.text.strip():
            raise InvalidSearchQueryError()
        object.__setattr__(self, "category", resolve_category(self.category))
        object.__setattr__(self, "recency", sanitize_recency(self.recency))
        object.__setattr__(self, "page", max(1, int(self.page)))


@dataclass(slots=True)
class SearchResult:
    """Canonical search hit; ``url`` is its identity."""

    title: str
    url: str
    snippet: str = ""
    domain: str = ""
    favicon: str = ""
    score: float | None = None
    date: str | None = None
    source: str | None = None
    img_src: str | None = None
    thumbnail: str | None = None

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "title": self.title,
            "url": self.url,
            "snippet": self.snippet,
            "domain": self.domain,
            "favicon": self.favicon,
        }
        optional = {
            "score": self.score,
            "date": self.date,
            "source": self.source,
            "img_src": self.img_src,
            "thumbnail": self.thumbnail,
        }
        payload.update({key: value for key, value in optional.items() if value is not None})
        return payload


@dataclass(slots=True)
class NormalizedPage:
    """Results extracted from one backend response."""

    results: list[SearchResult] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)


@dataclass(slots=True)
class SearchResponse:
    """Outcome of a whole metasearch query across retries."""

    results: list[SearchResult]
    suggestions: list[str] = field(default_factory=list)
    instance: str | None = None
    attempts: int = 0

    def as_dict(self) -> dict[str, Any]:
        return {
            "results": [result.as_dict() for result in self.results],
            "suggestions": list(self.suggestions),
        }


__all__ = [
    "NormalizedPage",
    "SearchQuery",
    "SearchResponse",
    "SearchResult",
    "resolve_category",
    "sanitize_recency",
]
