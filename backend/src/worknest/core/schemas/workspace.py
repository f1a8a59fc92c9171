"""
Workspace, folder and note schemas.
"""

from typing import List, Optional
from uuid import UUID

from pydantic import Field

from .common import CamelModel


class PublicNote(CamelModel):
    id: UUID
    name: str


class PublicFolder(CamelModel):
    """Folder with its notes and sub-folders, nested to any depth."""

    id: UUID
    name: str
    notes: List[PublicNote] = Field(default_factory=list)
    children: List["PublicFolder"] = Field(default_factory=list)


class PublicWorkspace(CamelModel):
    id: UUID
    name: str
    image: Optional[str] = None
    notes: List[PublicNote] = Field(default_factory=list)
    folders: List[PublicFolder] = Field(default_factory=list)


class WorkspaceCreate(CamelModel):
    name: str = Field(min_length=1, max_length=50, description="Workspace name, unique per user")
    image: Optional[str] = Field(default=None, max_length=2048, description="Image URL")

    model_config = {
        "json_schema_extra": {"example": {"name": "Research", "image": None}}
    }


class FolderCreate(CamelModel):
    name: str = Field(min_length=1, max_length=50, description="Folder name")
    parent_id: Optional[UUID] = Field(default=None, description="Parent folder, null for a root folder")


class FolderUpdate(CamelModel):
    """Partial update. An explicit null parentId moves the folder to the root."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    parent_id: Optional[UUID] = None


class NoteCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100, description="Note name")
    folder_id: Optional[UUID] = Field(default=None, description="Folder, null for an unfiled note")


class NoteUpdate(CamelModel):
    """Partial update. An explicit null folderId unfiles the note."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    folder_id: Optional[UUID] = None


PublicFolder.model_rebuild()
