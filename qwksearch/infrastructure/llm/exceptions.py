"""Chat model loading exceptions."""
from __future__ import annotations

from ...exceptions import ServiceError


class UnknownModelError(ServiceError):
    """Raised when a provider id or model key cannot be resolved."""

    status_code = 400
    default_message = "Invalid chat model"


__all__ = ["UnknownModelError"]
