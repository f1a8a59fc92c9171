"""Repository layer for data access."""

from .folder_repository import FolderRepository, NoteRepository
from .server_repository import ServerRepository
from .user_repository import UserRepository
from .workspace_repository import WorkspaceRepository

__all__ = [
    "UserRepository",
    "WorkspaceRepository",
    "FolderRepository",
    "NoteRepository",
    "ServerRepository",
]
