"""Metasearch client retry and request building tests."""
from __future__ import annotations

import asyncio
import json

import httpx

from qwksearch.search.client import MetasearchClient
from qwksearch.search.pool import InstancePool
from qwksearch.search.schemas import SearchQuery

EMPTY_PAGE = "<html><body><p>No results</p></body></html>"
RESULT_PAGE = (
    '<article class="result"><h3><a href="https://www.paris.fr/">Paris</a></h3>'
    '<p class="content">Paris is the capital of France.</p></article>'
)


class CountingBackend:
    """Mock transport handler replaying a scripted sequence of responses."""

    def __init__(self, responses: list) -> None:
        self.responses = responses
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests), len(self.responses)) - 1
        outcome = self.responses[index]
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, httpx.Response):
            return outcome
        return httpx.Response(200, text=outcome)


def _client(backend: CountingBackend, *, budget: int = 6, proxy: str | None = None) -> MetasearchClient:
    pool = InstancePool(["mirror-one.test", "mirror-two.test", "mirror-three.test"])
    return MetasearchClient(
        pool,
        retry_budget=budget,
        proxy=proxy,
        transport=httpx.MockTransport(backend),
    )


def test_empty_pages_are_retried_until_a_result_arrives() -> None:
    backend = CountingBackend([EMPTY_PAGE] * 5 + [RESULT_PAGE])
    client = _client(backend)

    response = asyncio.run(client.search(SearchQuery("capital of France", category="general")))

    assert [result.title for result in response.results] == ["Paris"]
    assert len(backend.requests) == 6
    assert response.attempts == 6


def test_retry_budget_caps_backend_calls() -> None:
    backend = CountingBackend([EMPTY_PAGE])
    client = _client(backend, budget=3)

    response = asyncio.run(client.search(SearchQuery("nothing matches this")))

    assert response.results == []
    assert len(backend.requests) == 4


def test_network_failures_count_as_empty_pages() -> None:
    request = httpx.Request("GET", "https://mirror-one.test/search")
    backend = CountingBackend(
        [
            httpx.ConnectError("connection refused", request=request),
            httpx.Response(503, text="busy"),
            RESULT_PAGE,
        ]
    )
    client = _client(backend)

    response = asyncio.run(client.search(SearchQuery("capital of France")))

    assert len(response.results) == 1
    assert len(backend.requests) == 3


def test_pinned_instance_is_asked_for_json_once() -> None:
    backend = CountingBackend([json.dumps({"results": []}), RESULT_PAGE])
    client = _client(backend)

    query = SearchQuery("capital of France", instance="https://search.test")
    response = asyncio.run(client.search(query))

    (pinned,) = backend.requests
    assert pinned.url.host == "search.test"
    assert pinned.url.params["format"] == "json"
    assert response.results == []
    assert response.attempts == 1


def test_request_parameters() -> None:
    backend = CountingBackend([RESULT_PAGE])
    client = _client(backend)

    query = SearchQuery("capital of France", category="news", recency="week", safesearch=True, page=2)
    asyncio.run(client.search(query))

    params = backend.requests[0].url.params
    assert params["q"] == "capital of France"
    assert params["category_news"] == "1"
    assert params["language"] == "en-US"
    assert params["time_range"] == "week"
    assert params["safesearch"] == "1"
    assert params["pageno"] == "2"
    assert backend.requests[0].headers["accept-language"].startswith("en-US")


def test_unknown_recency_is_never_sent() -> None:
    backend = CountingBackend([RESULT_PAGE])
    client = _client(backend)

    query = SearchQuery("capital of France", recency="decade")
    asyncio.run(client.search(query))

    assert query.recency is None
    assert "time_range" not in backend.requests[0].url.params
    assert backend.requests[0].url.params["safesearch"] == "0"


def test_proxy_prefixes_public_requests_only() -> None:
    client = _client(CountingBackend([RESULT_PAGE]), proxy="https://proxy.test/?url=")
    query = SearchQuery("capital of France")

    public_url = client.build_url("mirror-one.test", query, as_json=False)
    private_url = client.build_url("https://search.test", query, as_json=True)

    assert str(public_url).startswith("https://proxy.test/")
    assert private_url.host == "search.test"


def test_empty_pool_without_pinned_instance_returns_no_results() -> None:
    backend = CountingBackend([RESULT_PAGE])
    client = MetasearchClient(InstancePool([]), transport=httpx.MockTransport(backend))

    response = asyncio.run(client.search(SearchQuery("capital of France")))

    assert response.results == []
    assert backend.requests == []
