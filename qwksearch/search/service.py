"""Search service applying the caller-level private-to-public fallback."""
from __future__ import annotations

import logging
from dataclasses import replace
from time import perf_counter

from ..config import SearchSettings
from .client import MetasearchClient
from .constants import DEFAULT_CATEGORY, DEFAULT_LANGUAGE
from .schemas import SearchQuery, SearchResponse

LOGGER = logging.getLogger(__name__)


class SearchService:
    """Run metasearch queries against the private deployment, then the public pool."""

    def __init__(self, client: MetasearchClient, settings: SearchSettings) -> None:
        self.client = client
        self.settings = settings

    def build_query(
        self,
        text: str,
        *,
        category: str | int | None = DEFAULT_CATEGORY,
        recency: str | None = None,
        safesearch: bool = False,
        language: str = DEFAULT_LANGUAGE,
        page: int = 1,
        public_only: bool = False,
    ) -> SearchQuery:
        instance = None if public_only else (self.settings.private_instance or None)
        return SearchQuery(
            text=text,
            category=category or DEFAULT_CATEGORY,
            recency=recency,
            safesearch=safesearch,
            language=language or DEFAULT_LANGUAGE,
            page=page,
            instance=instance,
        )

    async def search(self, query: SearchQuery) -> SearchResponse:
        """Return results, re-issuing a pinned query against the public pool once when empty."""

        start = perf_counter()
        response = await self.client.search(query)
        if not response.results and query.instance:
            LOGGER.info(
                "Pinned search instance returned nothing; retrying public pool | instance=%s query=%r",
                query.instance,
                query.text,
            )
            fallback = await self.client.search(replace(query, instance=None))
            fallback.attempts += response.attempts
            response = fallback
        LOGGER.info(
            "Search completed | query=%r results=%d attempts=%d duration=%.3fs",
            query.text,
            len(response.results),
            response.attempts,
            perf_counter() - start,
        )
        return response


__all__ = ["SearchService"]
