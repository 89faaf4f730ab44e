"""Authentication specific exceptions."""
from __future__ import annotations

from ..exceptions import ServiceError
from .constants import AUTH_REQUIRED_MESSAGE


class AuthRequiredError(ServiceError):
    """Raised when a guarded endpoint is called without an identity."""

    status_code = 401
    default_message = AUTH_REQUIRED_MESSAGE


class AuthTransportError(AuthRequiredError):
    """Raised when the identity check itself failed for a caller presenting credentials."""


__all__ = ["AuthRequiredError", "AuthTransportError"]
