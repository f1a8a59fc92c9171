"""
Authentication schemas.

Covers the provider token response, the ID token profile, and the
token pair handed back to clients.
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .common import CamelModel


class PublicUser(CamelModel):
    id: UUID
    email: str
    name: str
    image: Optional[str] = None


class UserUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    image: Optional[str] = Field(default=None, max_length=2048)


class TokenPairResponse(CamelModel):
    access_token: str
    refresh_token: str


class LoginResponse(TokenPairResponse):
    user: PublicUser


class OAuthTokenSet(BaseModel):
    """Token endpoint response of the provider (snake_case per RFC 6749)."""

    model_config = ConfigDict(extra="allow")

    access_token: str
    token_type: str
    expires_in: int
    refresh_token: Optional[str] = None
    scope: Optional[str] = None
    expires_at: Optional[int] = None


class IdTokenUser(BaseModel):
    """Profile claims required from the ID token."""

    model_config = ConfigDict(extra="allow")

    sub: str = Field(min_length=1)
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+$")
    email_verified: Optional[bool] = None
    name: str
    picture: Optional[str] = None
