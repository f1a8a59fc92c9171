"""Middleware for authentication and other cross-cutting concerns."""

from .auth import BearerTokenParser, bearer_token, get_current_user_id

__all__ = ["get_current_user_id", "bearer_token", "BearerTokenParser"]
