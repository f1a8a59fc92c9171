"""Security utilities."""

from .jwt import (
    ACCESS_AUDIENCE,
    REFRESH_AUDIENCE,
    TokenPair,
    TokenVerificationError,
    VerificationFailure,
    issue_token_pair,
    verify_token,
)

__all__ = [
    "ACCESS_AUDIENCE",
    "REFRESH_AUDIENCE",
    "TokenPair",
    "TokenVerificationError",
    "VerificationFailure",
    "issue_token_pair",
    "verify_token",
]
