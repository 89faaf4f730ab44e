"""Metasearch client querying a rotating pool of search backends."""
from __future__ import annotations

import logging
from time import perf_counter

import httpx

from .constants import DEFAULT_REQUEST_TIMEOUT, DEFAULT_RETRY_BUDGET
from .exceptions import BackendUnavailableError
from .normalizers import HtmlResultNormalizer, JsonResultNormalizer, ResultNormalizer
from .pool import InstancePool
from .schemas import NormalizedPage, SearchQuery, SearchResponse

LOGGER = logging.getLogger(__name__)


def _base_url(instance: str) -> str:
    instance = instance.rstrip("/")
    if instance.startswith(("http://", "https://")):
        return instance
    return f"https://{instance}"


class MetasearchClient:
    """Issue one logical search, resampling instances while results are empty.

    A pinned instance is treated as an authoritative deployment and asked for
    JSON exactly once; falling back to the pool is the caller's decision. Pool
    instances are public mirrors whose HTML pages are scraped, and the retry
    budget is shared by the whole pool query, so mirrors are contacted at most
    ``retry_budget + 1`` times. Transport failures count as empty pages.
    """

    def __init__(
        self,
        pool: InstancePool,
        *,
        retry_budget: int = DEFAULT_RETRY_BUDGET,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        proxy: str | None = None,
        json_normalizer: ResultNormalizer | None = None,
        html_normalizer: ResultNormalizer | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._pool = pool
        self._retry_budget = max(0, retry_budget)
        self._timeout = timeout
        self._proxy = proxy or None
        self._json_normalizer = json_normalizer or JsonResultNormalizer()
        self._html_normalizer = html_normalizer or HtmlResultNormalizer()
        self._transport = transport

    @property
    def retry_budget(self) -> int:
        return self._retry_budget

    def build_url(self, instance: str, query: SearchQuery, *, as_json: bool) -> httpx.URL:
        params: list[tuple[str, str | int]] = [
            ("q", query.text),
            (f"category_{query.category}", 1),
            ("language", query.language),
        ]
        if query.recency:
            params.append(("time_range", query.recency))
        params.append(("safesearch", 1 if query.safesearch else 0))
        params.append(("pageno", query.page))
        if as_json:
            params.append(("format", "json"))
        url = httpx.URL(f"{_base_url(instance)}/search", params=params)
        if self._proxy and not as_json:
            url = httpx.URL(f"{self._proxy}{url}")
        return url

    async def search(self, query: SearchQuery) -> SearchResponse:
        budget = self._retry_budget
        attempts = 0
        tried: list[str] = []
        query_start = perf_counter()
        if not query.instance and not len(self._pool):
            LOGGER.warning("Metasearch skipped: no pinned instance and an empty pool | query=%r", query.text)
            return SearchResponse(results=[])
        async with httpx.AsyncClient(
            timeout=self._timeout,
            transport=self._transport,
            follow_redirects=True,
        ) as client:
            while True:
                instance = self._pool.choose(query.instance, tried=tried)
                tried.append(instance)
                attempts += 1
                normalizer = self._json_normalizer if query.instance else self._html_normalizer
                try:
                    page = await self._fetch(client, instance, query, normalizer)
                except BackendUnavailableError as exc:
                    LOGGER.warning(
                        "Search backend failed | instance=%s attempt=%d error=%s",
                        instance,
                        attempts,
                        exc.message,
                    )
                    page = NormalizedPage()
                else:
                    if not page.results:
                        LOGGER.info(
                            "Search backend returned no results | instance=%s attempt=%d",
                            instance,
                            attempts,
                        )

                if page.results or query.instance or budget <= 0:
                    LOGGER.info(
                        "Metasearch finished | query=%r category=%s results=%d attempts=%d duration=%.3fs",
                        query.text,
                        query.category,
                        len(page.results),
                        attempts,
                        perf_counter() - query_start,
                    )
                    return SearchResponse(
                        results=page.results,
                        suggestions=page.suggestions,
                        instance=instance,
                        attempts=attempts,
                    )
                budget -= 1

    async def _fetch(
        self,
        client: httpx.AsyncClient,
        instance: str,
        query: SearchQuery,
        normalizer: ResultNormalizer,
    ) -> NormalizedPage:
        url = self.build_url(instance, query, as_json=normalizer.response_format == "json")
        headers = {"accept-language": f"{query.language},en;q=0.9"}
        LOGGER.debug("Search backend request | instance=%s url=%s", instance, url)
        try:
            response = await client.get(url, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise BackendUnavailableError(instance, f"status {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise BackendUnavailableError(instance, str(exc) or exc.__class__.__name__) from exc
        return normalizer.normalize(response.text)


__all__ = ["MetasearchClient"]
