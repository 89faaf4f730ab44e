"""Turn raw backend responses into canonical ``SearchResult`` lists.

Two strategies exist: JSON for authoritative deployments that expose the
``format=json`` API, and a regex scraper for the HTML result pages served by
public mirrors.
"""
from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Literal

import tldextract
from dateutil import parser as date_parser

from .constants import FAVICON_SERVICE_URL
from .schemas import NormalizedPage, SearchResult

LOGGER = logging.getLogger(__name__)

RESULT_RE = re.compile(r'<article class="result[^>]*>[\s\S]*?</article>')
TITLE_URL_RE = re.compile(r'<h3><a href="([^"]*)"[^>]*>(.*?)</a></h3>')
SNIPPET_RE = re.compile(r'<p class="content">\s*(.*?)\s*</p>')
TAG_RE = re.compile(r"</?[^>]+(>|$)")
SCHEME_RE = re.compile(r"(http://|https://|www.)", re.IGNORECASE)
HOST_RE = re.compile(r"^(?:https?://)?(?:www\.)?([^/:?\s]+)(?:[/:?]|$)", re.IGNORECASE)
TITLE_SPLITTERS_RE = re.compile(r"(?: [|\-/:»] )|(?: - )|(?:\|)")

_HTML_ENTITIES = (
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
)

# Offline extractor: uses the public suffix snapshot bundled with tldextract.
_TLD_EXTRACT = tldextract.TLDExtract(suffix_list_urls=())


def strip_tags(value: str | None) -> str:
    if not value:
        return ""
    return TAG_RE.sub("", value)


def decode_entities(value: str | None) -> str:
    if not value:
        return ""
    for entity, replacement in _HTML_ENTITIES:
        value = value.replace(entity, replacement)
    return value


def extract_domain(url: str) -> str:
    return SCHEME_RE.sub("", url or "").split("/")[0]


def extract_host(url: str) -> str:
    match = HOST_RE.match(url or "")
    return match.group(1) if match else ""


def favicon_url(url: str, *, size: int | None = None) -> str:
    favicon = f"{FAVICON_SERVICE_URL}?domain={extract_host(url)}"
    if size:
        favicon += f"&sz={size}"
    return favicon


def debreadcrumb_title(title: str) -> str:
    """Collapse ``Site | Section | Article`` style titles to their longest segment."""

    if not TITLE_SPLITTERS_RE.search(title):
        return title
    parts = [part.strip() for part in TITLE_SPLITTERS_RE.split(title)]
    if len(parts) < 2:
        return title
    longest = max(parts, key=len)
    return longest if len(longest) > 10 else title


def source_label(domain: str) -> str | None:
    """Derive a display label from the registrable part of ``domain``."""

    if not domain:
        return None
    name = _TLD_EXTRACT(domain).domain
    if not name:
        return None
    label = re.sub(r"\b\w", lambda match: match.group(0).upper(), name)
    if len(label) < 5:
        label = label.upper()
    return label


def parse_metadata(metadata: Any) -> tuple[str | None, str | None]:
    """Split a ``date | source`` metadata string into an ISO date and a source."""

    if not isinstance(metadata, str):
        return None, None
    parts = [part.strip() for part in metadata.split("|")]
    if len(parts) <= 1:
        return None, None
    date: str | None = None
    try:
        date = date_parser.parse(metadata, fuzzy=True).date().isoformat()
    except (ValueError, OverflowError):
        date = None
    return date, parts[1] or None


class ResultNormalizer(ABC):
    """Strategy converting one backend response body into results."""

    response_format: Literal["json", "html"]

    @abstractmethod
    def normalize(self, body: str) -> NormalizedPage:
        """Return the results contained in ``body``; malformed input yields none."""


class JsonResultNormalizer(ResultNormalizer):
    """Normalize the JSON API of an authoritative deployment."""

    response_format = "json"

    def normalize(self, body: str) -> NormalizedPage:
        if not body.lstrip().startswith("{"):
            LOGGER.warning("JSON search backend returned a non-JSON body | chars=%d", len(body))
            return NormalizedPage()
        try:
            payload = json.loads(body)
        except json.JSONDecodeError as exc:
            LOGGER.warning("JSON search backend returned malformed JSON | error=%s", exc)
            return NormalizedPage()

        results = [
            result
            for result in (self._convert(item) for item in payload.get("results") or [])
            if result is not None
        ]
        suggestions = [str(item) for item in payload.get("suggestions") or [] if item]
        return NormalizedPage(results=results, suggestions=suggestions)

    def _convert(self, item: Any) -> SearchResult | None:
        if not isinstance(item, dict) or not item.get("url"):
            return None
        raw_url = str(item["url"])
        title = debreadcrumb_title(strip_tags(str(item.get("title") or "")))
        title = decode_entities(title)
        url = raw_url.replace("&amp;", "&")
        snippet = strip_tags(item.get("content"))
        score = item.get("score")
        domain = extract_domain(raw_url)
        date, source = parse_metadata(item.get("metadata"))
        if not source:
            source = source_label(domain)
        return SearchResult(
            title=title,
            url=url,
            snippet=snippet,
            domain=domain,
            favicon=favicon_url(raw_url, size=16),
            score=round(float(score), 2) if isinstance(score, (int, float)) else None,
            date=date,
            source=source,
            img_src=item.get("img_src") or None,
            thumbnail=item.get("thumbnail") or item.get("thumbnail_src") or None,
        )


class HtmlResultNormalizer(ResultNormalizer):
    """Scrape ``<article class="result">`` blocks from a public mirror page."""

    response_format = "html"

    def normalize(self, body: str) -> NormalizedPage:
        results: list[SearchResult] = []
        for block in RESULT_RE.finditer(body):
            article = block.group(0)
            title_url = TITLE_URL_RE.search(article)
            if not title_url or not title_url.group(1) or not title_url.group(2):
                continue
            snippet_match = SNIPPET_RE.search(article)
            title = decode_entities(strip_tags(title_url.group(2)))
            snippet = decode_entities(strip_tags(snippet_match.group(1))) if snippet_match else ""
            url = decode_entities(title_url.group(1))
            results.append(
                SearchResult(
                    title=title,
                    url=url,
                    snippet=snippet,
                    domain=extract_domain(url),
                    favicon=favicon_url(url),
                )
            )
        return NormalizedPage(results=results)


__all__ = [
    "HtmlResultNormalizer",
    "JsonResultNormalizer",
    "ResultNormalizer",
    "debreadcrumb_title",
    "decode_entities",
    "extract_domain",
    "favicon_url",
    "source_label",
    "strip_tags",
]
