"""
Database models for Worknest.

SQLAlchemy ORM models defining the schema. All models share BaseModel
(UUID primary key plus created/updated timestamps).

Models included:
    - User / Account: identities and their linked OAuth accounts
    - Workspace, Folder, Note: the per-user workspace tree
    - Server: registered external servers
"""

from .base import BaseModel
from .server import Server
from .user import Account, User
from .workspace import Folder, Note, Workspace

__all__ = [
    "BaseModel",
    "User",
    "Account",
    "Workspace",
    "Folder",
    "Note",
    "Server",
]
