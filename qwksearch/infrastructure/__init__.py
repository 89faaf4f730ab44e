"""Infrastructure package exports."""

from . import database, llm, repositories

__all__ = ["database", "llm", "repositories"]
