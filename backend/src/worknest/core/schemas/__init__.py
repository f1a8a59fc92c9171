"""
Pydantic schemas for the API request/response contracts.

Field names are snake_case in Python and camelCase on the wire.
"""

from .auth import IdTokenUser, LoginResponse, OAuthTokenSet, PublicUser, TokenPairResponse, UserUpdate
from .common import (
    CamelModel,
    DatabaseHealthResponse,
    ErrorResponse,
    HealthResponse,
    Page,
    PageMeta,
    PaginationQuery,
)
from .server import PublicServer, ServerCreate, ServerUpdate
from .workspace import (
    FolderCreate,
    FolderUpdate,
    NoteCreate,
    NoteUpdate,
    PublicFolder,
    PublicNote,
    PublicWorkspace,
    WorkspaceCreate,
)

__all__ = [
    # Common
    "CamelModel",
    "ErrorResponse",
    "HealthResponse",
    "DatabaseHealthResponse",
    "Page",
    "PageMeta",
    "PaginationQuery",
    # Auth / user
    "PublicUser",
    "UserUpdate",
    "TokenPairResponse",
    "LoginResponse",
    "OAuthTokenSet",
    "IdTokenUser",
    # Workspace tree
    "PublicWorkspace",
    "WorkspaceCreate",
    "PublicFolder",
    "FolderCreate",
    "FolderUpdate",
    "PublicNote",
    "NoteCreate",
    "NoteUpdate",
    # Servers
    "PublicServer",
    "ServerCreate",
    "ServerUpdate",
]
