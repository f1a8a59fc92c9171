"""Authentication service implementation.

Drives the OAuth authorization-code flow (PKCE) against a registered
provider, upserts the user and issues our own token pair.
"""

import time
from dataclasses import dataclass
from typing import Optional

from authlib.common.security import generate_token
from authlib.oauth2.rfc7636 import create_s256_code_challenge
from fastapi import status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from ...security.jwt import REFRESH_AUDIENCE, TokenPair, TokenVerificationError, issue_token_pair, verify_token
from ...security.oauth import (
    IdTokenError,
    OAuthProvider,
    ProviderError,
    ProviderRegistry,
    StateMismatchError,
)
from ..exceptions import ApiError
from ..logging import get_logger
from ..models.user import User
from ..schemas.auth import IdTokenUser, OAuthTokenSet
from .user_service import UserService

logger = get_logger("auth")

COOKIE_CODE_VERIFIER = "oauth_code_verifier"
COOKIE_STATE = "oauth_state"


@dataclass(frozen=True)
class LoginRedirect:
    url: str
    state: str
    code_verifier: str


@dataclass
class LoginResult:
    user: User
    tokens: TokenPair


class AuthService:
    """OAuth login orchestration."""

    def __init__(self, session: AsyncSession, registry: ProviderRegistry):
        self.session = session
        self.registry = registry
        self.user_service = UserService(session)

    def get_provider(self, name: str) -> OAuthProvider:
        provider = self.registry.get(name)
        if provider is None:
            raise ApiError(
                status.HTTP_400_BAD_REQUEST,
                "unsupported_provider",
                f"Unsupported provider: {name}",
            )
        return provider

    @staticmethod
    def refresh_tokens(raw_token: str) -> TokenPair:
        """Issue a new pair for the subject of a valid refresh token.

        The presented token is not consumed: earlier refresh tokens stay valid
        until they expire.
        """
        try:
            claims = verify_token(raw_token, REFRESH_AUDIENCE)
        except TokenVerificationError as exc:
            logger.info("Refresh rejected", extra={"kind": exc.kind.value})
            raise ApiError(
                status.HTTP_401_UNAUTHORIZED, "invalid_token", "The refresh token is invalid."
            ) from exc
        return issue_token_pair(claims.sub)

    async def begin_login(self, provider_name: str) -> LoginRedirect:
        """Create PKCE verifier and state and build the provider URL."""
        provider = self.get_provider(provider_name)
        verifier = generate_token(64)
        state = generate_token(32)
        url = await provider.build_authorization_url(create_s256_code_challenge(verifier), state)
        return LoginRedirect(url=url, state=state, code_verifier=verifier)

    async def complete_login(
        self,
        provider_name: str,
        callback_url: str,
        code: Optional[str],
        state: Optional[str],
        code_verifier: Optional[str],
    ) -> LoginResult:
        """Handle the provider callback.

        ``state`` and ``code_verifier`` come from the cookies set by begin_login.
        """
        provider = self.get_provider(provider_name)

        if not code or not state:
            raise ApiError(
                status.HTTP_400_BAD_REQUEST,
                "invalid_oauth_request",
                "The authorization code or state is missing.",
            )

        try:
            result = await provider.exchange_code(callback_url, code_verifier or "", state)
        except StateMismatchError as exc:
            logger.warning("OAuth state mismatch", extra={"provider": provider_name})
            raise ApiError(
                status.HTTP_400_BAD_REQUEST, "invalid_oauth_state", "The OAuth state does not match."
            ) from exc
        except IdTokenError as exc:
            logger.warning("ID token rejected", extra={"provider": provider_name, "error": str(exc)})
            raise ApiError(
                status.HTTP_500_INTERNAL_SERVER_ERROR, "invalid_id_token", "The ID token is invalid."
            ) from exc
        except ProviderError as exc:
            logger.warning("OAuth exchange failed", extra={"provider": provider_name, "error": str(exc)})
            raise ApiError(
                status.HTTP_400_BAD_REQUEST, "invalid_oauth_request", "The OAuth request was rejected."
            ) from exc

        try:
            token_set = OAuthTokenSet.model_validate(result.token)
        except ValidationError as exc:
            raise ApiError(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "invalid_oauth_tokens",
                "The provider returned invalid tokens.",
            ) from exc

        if not result.id_claims:
            raise ApiError(
                status.HTTP_500_INTERNAL_SERVER_ERROR, "missing_id_token", "No ID token was returned."
            )

        try:
            profile = IdTokenUser.model_validate(result.id_claims)
        except ValidationError as exc:
            raise ApiError(
                status.HTTP_500_INTERNAL_SERVER_ERROR, "invalid_id_token", "The ID token is invalid."
            ) from exc

        expires_at = token_set.expires_at or int(time.time()) + token_set.expires_in
        user = await self.user_service.put_user(
            {"email": profile.email, "name": profile.name, "image": profile.picture},
            {
                "provider": provider_name,
                "provider_account_id": profile.sub,
                "access_token": token_set.access_token,
                "refresh_token": token_set.refresh_token,
                "expires_at": expires_at,
                "scope": token_set.scope,
            },
        )

        logger.info("User signed in", extra={"user_id": str(user.id), "provider": provider_name})
        return LoginResult(user=user, tokens=issue_token_pair(user.id))
