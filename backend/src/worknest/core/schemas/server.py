"""Server registry schemas."""

from typing import Optional
from uuid import UUID

from pydantic import AnyHttpUrl, Field

from .common import CamelModel


class PublicServer(CamelModel):
    id: UUID
    name: str
    url: str


class ServerCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100, description="Server name, unique per user")
    url: AnyHttpUrl = Field(description="Base URL, must answer GET <url>/health with 200")

    model_config = {
        "json_schema_extra": {"example": {"name": "home", "url": "https://home.example.com"}}
    }


class ServerUpdate(CamelModel):
    """Only the URL can be changed."""

    url: Optional[AnyHttpUrl] = None
