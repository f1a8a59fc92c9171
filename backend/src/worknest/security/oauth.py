"""OAuth / OpenID Connect providers.

Providers are looked up by name in a ProviderRegistry. Adding a provider
means registering another OAuthProvider implementation.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Dict, Optional

from authlib.common.errors import AuthlibBaseError
from authlib.integrations.httpx_client import AsyncOAuth2Client
from authlib.oauth2.rfc6749.errors import MismatchingStateException
from jose import JWTError, jwt

from ..config import Settings, get_settings
from ..core.logging import get_logger

logger = get_logger("oauth")


class ProviderError(Exception):
    """The provider rejected the authorization exchange."""


class StateMismatchError(ProviderError):
    """The state returned by the provider does not match the cookie."""


class IdTokenError(ProviderError):
    """The ID token could not be verified."""


@dataclass
class ProviderTokens:
    """Token endpoint response plus the verified ID token claims, if any."""

    token: Dict[str, Any]
    id_claims: Optional[Dict[str, Any]] = None


class OAuthProvider(ABC):
    """Capabilities every login provider offers."""

    name: str

    @abstractmethod
    async def build_authorization_url(self, code_challenge: str, state: str) -> str:
        """URL the browser is redirected to (PKCE S256)."""

    @abstractmethod
    async def exchange_code(
        self, callback_url: str, code_verifier: str, state: str
    ) -> ProviderTokens:
        """Trade the authorization code in callback_url for tokens."""


class GoogleProvider(OAuthProvider):
    """Google OpenID Connect provider."""

    name = "google"
    scope = "openid email profile"

    def __init__(self, settings: Settings):
        self.client_id = settings.google_client_id
        self.client_secret = settings.google_client_secret
        self.redirect_uri = settings.google_redirect_uri
        self.discovery_url = settings.google_discovery_url
        self._metadata: Optional[Dict[str, Any]] = None
        self._jwks: Optional[Dict[str, Any]] = None

    def _client(self, **kwargs) -> AsyncOAuth2Client:
        return AsyncOAuth2Client(
            client_id=self.client_id,
            client_secret=self.client_secret,
            scope=self.scope,
            redirect_uri=self.redirect_uri,
            **kwargs,
        )

    async def _get_json(self, url: str) -> Dict[str, Any]:
        async with self._client() as client:
            response = await client.get(url)
            response.raise_for_status()
            return response.json()

    async def metadata(self) -> Dict[str, Any]:
        """OIDC discovery document, fetched once."""
        if self._metadata is None:
            self._metadata = await self._get_json(self.discovery_url)
            logger.info("Loaded OIDC discovery document", extra={"provider": self.name})
        return self._metadata

    async def jwks(self) -> Dict[str, Any]:
        if self._jwks is None:
            metadata = await self.metadata()
            self._jwks = await self._get_json(metadata["jwks_uri"])
        return self._jwks

    async def build_authorization_url(self, code_challenge: str, state: str) -> str:
        metadata = await self.metadata()
        async with self._client() as client:
            url, _ = client.create_authorization_url(
                metadata["authorization_endpoint"],
                state=state,
                code_challenge=code_challenge,
                code_challenge_method="S256",
                access_type="offline",
                prompt="consent",
            )
        return url

    async def exchange_code(
        self, callback_url: str, code_verifier: str, state: str
    ) -> ProviderTokens:
        metadata = await self.metadata()
        async with self._client(state=state) as client:
            try:
                token = await client.fetch_token(
                    metadata["token_endpoint"],
                    authorization_response=callback_url,
                    code_verifier=code_verifier,
                    state=state,
                )
            except MismatchingStateException as exc:
                raise StateMismatchError(str(exc)) from exc
            except AuthlibBaseError as exc:
                raise ProviderError(str(exc)) from exc

        token = dict(token)
        raw_id_token = token.get("id_token")
        if not raw_id_token:
            return ProviderTokens(token=token)

        try:
            claims = jwt.decode(
                raw_id_token,
                await self.jwks(),
                algorithms=metadata.get("id_token_signing_alg_values_supported", ["RS256"]),
                audience=self.client_id,
                issuer=metadata["issuer"],
                access_token=token.get("access_token"),
            )
        except JWTError as exc:
            raise IdTokenError(str(exc)) from exc

        return ProviderTokens(token=token, id_claims=claims)


@dataclass
class ProviderRegistry:
    """Maps provider names to implementations."""

    providers: Dict[str, OAuthProvider] = field(default_factory=dict)

    def register(self, provider: OAuthProvider) -> None:
        self.providers[provider.name] = provider

    def get(self, name: str) -> Optional[OAuthProvider]:
        return self.providers.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self.providers


def build_registry(settings: Settings) -> ProviderRegistry:
    """Register every provider that has client credentials configured."""
    registry = ProviderRegistry()
    if settings.google_configured:
        registry.register(GoogleProvider(settings))
    else:
        logger.warning("Google OAuth is not configured, provider disabled")
    return registry


@lru_cache(maxsize=1)
def get_provider_registry() -> ProviderRegistry:
    """FastAPI dependency returning the process-wide registry."""
    return build_registry(get_settings())
