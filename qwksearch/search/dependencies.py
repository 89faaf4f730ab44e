"""Dependencies for the search module."""
from __future__ import annotations

import httpx

from ..config import SearchSettings
from ..dependencies import get_settings
from .client import MetasearchClient
from .pool import InstancePool
from .service import SearchService


def build_search_service(
    settings: SearchSettings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> SearchService:
    """Assemble the metasearch stack from the search settings."""

    settings = settings or get_settings().search
    pool = InstancePool(settings.public_instances, non_repeating=settings.non_repeating_sampling)
    client = MetasearchClient(
        pool,
        retry_budget=settings.retry_budget,
        timeout=settings.request_timeout,
        proxy=settings.proxy,
        transport=transport,
    )
    return SearchService(client, settings)


async def get_search_service() -> SearchService:
    return build_search_service()


__all__ = ["build_search_service", "get_search_service"]
