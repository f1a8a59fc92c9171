# Workspace tree models: workspace, folder, note
import uuid
from typing import Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel
from .types import GUID


class Workspace(BaseModel):
    """User-owned container for folders and notes."""

    __tablename__ = "workspaces"

    user_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    image: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)

    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_workspaces_user_name"),
        CheckConstraint("length(name) <= 50", name="ck_workspaces_name_len"),
        Index("idx_workspaces_user_created", "user_id", "created_at"),
    )


class Folder(BaseModel):
    """Folder inside a workspace. parent_id NULL means root folder.

    Parent links are plain ids, the tree is rebuilt by the assembler.
    """

    __tablename__ = "folders"

    workspace_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False
    )
    parent_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        GUID(), ForeignKey("folders.id", ondelete="CASCADE"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(50), nullable=False)

    __table_args__ = (
        CheckConstraint("length(name) <= 50", name="ck_folders_name_len"),
        Index("idx_folders_workspace_parent", "workspace_id", "parent_id"),
    )

    def __repr__(self) -> str:
        return f"<Folder(name='{self.name}', workspace_id={self.workspace_id})>"


class Note(BaseModel):
    """Leaf entity. Owned by its workspace, folder_id is only a placement."""

    __tablename__ = "notes"

    workspace_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False
    )
    folder_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        GUID(), ForeignKey("folders.id", ondelete="SET NULL"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)

    __table_args__ = (
        CheckConstraint("length(name) <= 100", name="ck_notes_name_len"),
        Index("idx_notes_workspace_folder", "workspace_id", "folder_id"),
    )

    def __repr__(self) -> str:
        return f"<Note(name='{self.name}', workspace_id={self.workspace_id})>"
