"""Constants used across the authentication package."""

BEARER_PREFIX = "bearer "
JWT_LOGIN_URL = "/auth/jwt/login"
AUTH_REQUIRED_MESSAGE = "Authentication required"

__all__ = ["BEARER_PREFIX", "JWT_LOGIN_URL", "AUTH_REQUIRED_MESSAGE"]
