"""Permission checks for the workspace tree.

Checks answer a plain yes/no and never tell "missing" apart from "not
yours". Services that need that distinction look the resource up first.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ..repositories.folder_repository import FolderRepository, NoteRepository
from ..repositories.workspace_repository import WorkspaceRepository


class PermissionService:
    """Ownership checks through the workspace owner."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.workspace_repo = WorkspaceRepository(session)
        self.folder_repo = FolderRepository(session)
        self.note_repo = NoteRepository(session)

    async def can_access_workspace(self, user_id: UUID, workspace_id: UUID) -> bool:
        """Workspace exists and user_id owns it."""
        return await self.workspace_repo.is_owned_by(user_id, workspace_id)

    async def can_access_folder(
        self, user_id: UUID, workspace_id: UUID, folder_id: Optional[UUID] = None
    ) -> bool:
        """Workspace access plus, when folder_id is given, the folder is in that workspace."""
        if folder_id is None:
            return await self.can_access_workspace(user_id, workspace_id)
        return await self.folder_repo.is_accessible(user_id, workspace_id, folder_id)

    async def can_access_note(self, user_id: UUID, workspace_id: UUID, note_id: UUID) -> bool:
        """Workspace access plus the note is in that workspace."""
        return await self.note_repo.is_accessible(user_id, workspace_id, note_id)
