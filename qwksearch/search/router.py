"""Metasearch endpoint."""
from __future__ import annotations

from time import perf_counter
from typing import Any

from fastapi import APIRouter, Depends, Query

from .constants import DEFAULT_CATEGORY, DEFAULT_LANGUAGE
from .dependencies import get_search_service
from .exceptions import InvalidSearchQueryError, NoResultsFoundError
from .service import SearchService

router = APIRouter()


def _flag(value: str | None) -> bool:
    return value == "true"


@router.get("/search")
async def search(
    q: str | None = Query(default=None),
    cat: str = Query(default=DEFAULT_CATEGORY),
    page: int = Query(default=1),
    lang: str = Query(default=DEFAULT_LANGUAGE),
    safesearch: str | None = Query(default=None),
    recency: str | None = Query(default=None),
    public_instances: str | None = Query(default=None, alias="publicInstances"),
    service: SearchService = Depends(get_search_service),
) -> dict[str, Any]:
    if not q:
        raise InvalidSearchQueryError()
    started = perf_counter()
    query = service.build_query(
        q,
        category=cat,
        recency=recency,
        safesearch=_flag(safesearch),
        language=lang,
        page=page,
        public_only=_flag(public_instances),
    )
    response = await service.search(query)
    if not response.results:
        raise NoResultsFoundError()
    payload = response.as_dict()
    payload["elapsedTime"] = int((perf_counter() - started) * 1000)
    return payload


__all__ = ["router"]
