"""Authentication dependencies."""

import re
from uuid import UUID

from fastapi import Depends, Request, status

from ..core.exceptions import ApiError
from ..core.logging import get_logger
from ..security.jwt import ACCESS_AUDIENCE, TokenVerificationError, verify_token

logger = get_logger("auth")

BEARER_PATTERN = re.compile(r"^Bearer\s+(.+)$", re.IGNORECASE)


class BearerTokenParser:
    """Extract the raw token from ``Authorization: Bearer <token>``.

    Only parses the header, verification is left to the caller.
    """

    async def __call__(self, request: Request) -> str:
        header = request.headers.get("Authorization")
        if not header:
            raise ApiError(
                status.HTTP_401_UNAUTHORIZED,
                "missing_authorization_header",
                "The Authorization header is missing.",
            )

        match = BEARER_PATTERN.match(header)
        if not match:
            raise ApiError(
                status.HTTP_401_UNAUTHORIZED,
                "invalid_authorization_header",
                "The Authorization header is malformed.",
            )

        return match.group(1).strip()


bearer_token = BearerTokenParser()


# Dependency for getting current user ID from JWT
async def get_current_user_id(token: str = Depends(bearer_token)) -> UUID:
    """Verify an access token and return its subject."""
    try:
        claims = verify_token(token, ACCESS_AUDIENCE)
    except TokenVerificationError as exc:
        logger.info("Rejected access token", extra={"kind": exc.kind.value})
        raise ApiError(status.HTTP_401_UNAUTHORIZED, exc.code, exc.message) from exc

    return claims.sub
