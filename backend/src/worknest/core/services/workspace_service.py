"""Workspace service implementation."""

from dataclasses import dataclass, field
from typing import Any, List
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ...database import transaction
from ..logging import get_logger
from ..models.workspace import Workspace
from ..repositories.workspace_repository import WorkspaceRepository
from ..schemas.common import PaginationQuery
from ..schemas.workspace import PublicWorkspace, WorkspaceCreate
from .results import Failure, Ok, ServiceResult
from .tree_assembler import FolderRow, assemble_forest, flatten_notes, to_public_folder, to_public_note

logger = get_logger("workspace")


@dataclass
class WorkspaceView:
    """A workspace with the folders and notes to show alongside it.

    ``folders`` holds assembled FolderNode trees for a detailed fetch and
    plain folder rows otherwise.
    """

    workspace: Workspace
    folders: List[Any] = field(default_factory=list)
    notes: List[Any] = field(default_factory=list)


def to_public_workspace(view: WorkspaceView) -> PublicWorkspace:
    return PublicWorkspace(
        id=view.workspace.id,
        name=view.workspace.name,
        image=view.workspace.image,
        notes=[to_public_note(note) for note in view.notes],
        folders=[to_public_folder(folder) for folder in view.folders],
    )


class WorkspaceService:
    """Workspace retrieval and creation."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.workspace_repo = WorkspaceRepository(session)

    async def list_workspaces(self, user_id: UUID, query: PaginationQuery) -> List[WorkspaceView]:
        """One page of the user's workspaces with their folders and notes (not nested)."""
        workspaces = await self.workspace_repo.list_for_user(user_id, query)
        ids = [w.id for w in workspaces]
        folders = await self.workspace_repo.folders_by_workspace(ids)
        notes = await self.workspace_repo.notes_by_workspace(ids)
        return [
            WorkspaceView(workspace=w, folders=folders.get(w.id, []), notes=notes.get(w.id, []))
            for w in workspaces
        ]

    async def get_workspace(
        self, user_id: UUID, workspace_id: UUID, detailed: bool = False
    ) -> ServiceResult[WorkspaceView]:
        """Fetch one owned workspace.

        Missing and foreign workspaces both give NOT_FOUND. With ``detailed``
        the whole folder tree is loaded with a single recursive query and
        assembled in memory. ``notes`` then lists every note filed in a folder.
        """
        workspace = await self.workspace_repo.get_owned(user_id, workspace_id)
        if workspace is None:
            return Failure.NOT_FOUND

        if not detailed:
            folders = await self.workspace_repo.folders_by_workspace([workspace.id])
            notes = await self.workspace_repo.notes_by_workspace([workspace.id])
            return Ok(
                WorkspaceView(
                    workspace=workspace,
                    folders=folders.get(workspace.id, []),
                    notes=notes.get(workspace.id, []),
                )
            )

        rows = [FolderRow(**row) for row in await self.workspace_repo.fetch_folder_rows(workspace.id)]
        return Ok(
            WorkspaceView(
                workspace=workspace,
                folders=assemble_forest(rows),
                notes=flatten_notes(rows),
            )
        )

    async def create_workspace(
        self, user_id: UUID, request: WorkspaceCreate
    ) -> ServiceResult[WorkspaceView]:
        """Create a workspace, the name must be unused for this user."""
        try:
            async with transaction(self.session):
                if await self.workspace_repo.get_by_name(user_id, request.name) is not None:
                    return Failure.ALREADY_EXISTS
                workspace = await self.workspace_repo.create(
                    {"user_id": user_id, "name": request.name, "image": request.image}
                )
        except IntegrityError:
            # lost a race on the (user_id, name) unique constraint
            logger.info("Workspace name taken concurrently", extra={"user_id": str(user_id)})
            return Failure.ALREADY_EXISTS

        logger.info("Workspace created", extra={"workspace_id": str(workspace.id)})
        return Ok(WorkspaceView(workspace=workspace))
