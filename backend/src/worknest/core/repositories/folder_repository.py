"""Folder and note repositories."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, exists, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from ..models.workspace import Folder, Note, Workspace


class FolderRepository:
    """Repository for folder database operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, folder_id: UUID) -> Optional[Folder]:
        stmt = select(Folder).where(Folder.id == folder_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def exists_in_workspace(self, folder_id: UUID, workspace_id: UUID) -> bool:
        stmt = select(exists().where(Folder.id == folder_id, Folder.workspace_id == workspace_id))
        return bool((await self.session.execute(stmt)).scalar())

    async def is_accessible(self, user_id: UUID, workspace_id: UUID, folder_id: UUID) -> bool:
        """Folder lives in the workspace and the workspace belongs to user_id."""
        stmt = select(
            exists()
            .where(Folder.id == folder_id, Folder.workspace_id == workspace_id)
            .where(Workspace.id == Folder.workspace_id, Workspace.user_id == user_id)
        )
        return bool((await self.session.execute(stmt)).scalar())

    async def ancestor_ids(self, folder_id: UUID) -> List[UUID]:
        """Ids on the parent chain of folder_id, the folder itself included."""
        chain = (
            select(Folder.id, Folder.parent_id)
            .where(Folder.id == folder_id)
            .cte("folder_chain", recursive=True)
        )
        parent = aliased(Folder, name="parent")
        chain = chain.union(
            select(parent.id, parent.parent_id)
            .select_from(parent)
            .join(chain, parent.id == chain.c.parent_id)
        )
        result = await self.session.execute(select(chain.c.id))
        return list(result.scalars())

    async def create(self, folder_data: dict) -> Folder:
        folder = Folder(**folder_data)
        self.session.add(folder)
        await self.session.flush()
        await self.session.refresh(folder)
        return folder

    async def update(self, folder: Folder, update_data: dict) -> Folder:
        for key, value in update_data.items():
            setattr(folder, key, value)
        await self.session.flush()
        await self.session.refresh(folder)
        return folder

    async def delete(self, folder_id: UUID) -> bool:
        """Delete a folder. Sub-folders cascade, notes inside become unfiled."""
        result = await self.session.execute(delete(Folder).where(Folder.id == folder_id))
        return result.rowcount > 0


class NoteRepository:
    """Repository for note database operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, note_id: UUID) -> Optional[Note]:
        stmt = select(Note).where(Note.id == note_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def is_accessible(self, user_id: UUID, workspace_id: UUID, note_id: UUID) -> bool:
        """Note lives in the workspace and the workspace belongs to user_id."""
        stmt = select(
            exists()
            .where(Note.id == note_id, Note.workspace_id == workspace_id)
            .where(Workspace.id == Note.workspace_id, Workspace.user_id == user_id)
        )
        return bool((await self.session.execute(stmt)).scalar())

    async def create(self, note_data: dict) -> Note:
        note = Note(**note_data)
        self.session.add(note)
        await self.session.flush()
        await self.session.refresh(note)
        return note

    async def update(self, note: Note, update_data: dict) -> Note:
        for key, value in update_data.items():
            setattr(note, key, value)
        await self.session.flush()
        await self.session.refresh(note)
        return note

    async def delete(self, note_id: UUID) -> bool:
        result = await self.session.execute(delete(Note).where(Note.id == note_id))
        return result.rowcount > 0
