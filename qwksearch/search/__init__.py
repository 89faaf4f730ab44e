"""Metasearch package exports."""

from .client import MetasearchClient
from .normalizers import HtmlResultNormalizer, JsonResultNormalizer, ResultNormalizer
from .pool import InstancePool
from .schemas import SearchQuery, SearchResponse, SearchResult

__all__ = [
    "HtmlResultNormalizer",
    "InstancePool",
    "JsonResultNormalizer",
    "MetasearchClient",
    "ResultNormalizer",
    "SearchQuery",
    "SearchResponse",
    "SearchResult",
]
