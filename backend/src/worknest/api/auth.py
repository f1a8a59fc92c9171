"""Authentication API endpoints."""

from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Cookie, Depends, Query, Request, Response, status
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import get_settings
from ..core.exceptions import ApiError
from ..core.schemas.auth import LoginResponse, PublicUser, TokenPairResponse
from ..core.schemas.common import error_responses
from ..core.services import AuthService
from ..core.services.auth_service import COOKIE_CODE_VERIFIER, COOKIE_STATE
from ..database import get_db_session
from ..middleware.auth import bearer_token
from ..security.oauth import ProviderRegistry, get_provider_registry

router = APIRouter(prefix="/auth", tags=["authentication"])


def _set_oauth_cookie(response: Response, key: str, value: str) -> None:
    settings = get_settings()
    response.set_cookie(
        key,
        value,
        max_age=settings.oauth_cookie_max_age,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )


def _clear_oauth_cookies(response: Response) -> None:
    for key in (COOKIE_CODE_VERIFIER, COOKIE_STATE):
        response.delete_cookie(key, path="/", httponly=True, samesite="lax")


@router.get("/refresh", include_in_schema=False)
async def refresh_wrong_method():
    # Declared before /{provider} so "refresh" is never taken for a provider name
    raise ApiError(
        status.HTTP_405_METHOD_NOT_ALLOWED,
        "method_not_allowed",
        "Use POST to refresh tokens.",
        headers={"Allow": "POST"},
    )


@router.post("/refresh", response_model=TokenPairResponse, responses=error_responses(401))
async def refresh_token(token: str = Depends(bearer_token)):
    """Exchange a refresh token (sent as the bearer token) for a new token pair."""
    pair = AuthService.refresh_tokens(token)
    return TokenPairResponse(access_token=pair.access_token, refresh_token=pair.refresh_token)


@router.get(
    "/{provider}",
    status_code=status.HTTP_302_FOUND,
    response_class=RedirectResponse,
    responses=error_responses(400),
)
async def login(
    provider: str,
    session: AsyncSession = Depends(get_db_session),
    registry: ProviderRegistry = Depends(get_provider_registry),
):
    """Start an OAuth login: set the PKCE cookies and redirect to the provider."""
    auth_service = AuthService(session, registry)
    redirect = await auth_service.begin_login(provider)

    response = RedirectResponse(redirect.url, status_code=status.HTTP_302_FOUND)
    _set_oauth_cookie(response, COOKIE_CODE_VERIFIER, redirect.code_verifier)
    _set_oauth_cookie(response, COOKIE_STATE, redirect.state)
    return response


@router.get(
    "/{provider}/callback",
    response_model=LoginResponse,
    responses=error_responses(400, 500),
)
async def login_callback(
    provider: str,
    request: Request,
    code: Optional[str] = Query(None),
    oauth_state: Optional[str] = Cookie(None),
    oauth_code_verifier: Optional[str] = Cookie(None),
    session: AsyncSession = Depends(get_db_session),
    registry: ProviderRegistry = Depends(get_provider_registry),
):
    """Finish an OAuth login.

    Redirects to the configured success URL with the tokens in the query
    string, or returns them as JSON when no such URL is set.
    """
    auth_service = AuthService(session, registry)
    result = await auth_service.complete_login(
        provider,
        callback_url=str(request.url),
        code=code,
        state=oauth_state,
        code_verifier=oauth_code_verifier,
    )

    success_url = get_settings().oauth_success_redirect_url
    if success_url:
        query = urlencode(
            {
                "accessToken": result.tokens.access_token,
                "refreshToken": result.tokens.refresh_token,
            }
        )
        separator = "&" if "?" in success_url else "?"
        response = RedirectResponse(f"{success_url}{separator}{query}", status_code=status.HTTP_302_FOUND)
    else:
        body = LoginResponse(
            user=PublicUser.model_validate(result.user),
            access_token=result.tokens.access_token,
            refresh_token=result.tokens.refresh_token,
        )
        response = JSONResponse(body.model_dump(mode="json", by_alias=True))

    _clear_oauth_cookies(response)
    return response
