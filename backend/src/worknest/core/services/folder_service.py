"""Folder service implementation."""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ...database import transaction
from ..logging import get_logger
from ..models.workspace import Folder
from ..repositories.folder_repository import FolderRepository
from ..schemas.workspace import FolderCreate, FolderUpdate
from .permission_service import PermissionService
from .results import Failure, Ok, ServiceResult

logger = get_logger("folder")


class FolderService:
    """Folder CRUD. Each mutation re-checks access inside its transaction."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.folder_repo = FolderRepository(session)
        self.permissions = PermissionService(session)

    async def create_folder(
        self, user_id: UUID, workspace_id: UUID, request: FolderCreate
    ) -> ServiceResult[Folder]:
        async with transaction(self.session):
            if not await self.permissions.can_access_workspace(user_id, workspace_id):
                return Failure.NO_PERMISSION

            if request.parent_id is not None and not await self.folder_repo.exists_in_workspace(
                request.parent_id, workspace_id
            ):
                return Failure.NOT_FOUND

            folder = await self.folder_repo.create(
                {"workspace_id": workspace_id, "parent_id": request.parent_id, "name": request.name}
            )

        logger.info("Folder created", extra={"folder_id": str(folder.id), "workspace_id": str(workspace_id)})
        return Ok(folder)

    async def update_folder(
        self, user_id: UUID, workspace_id: UUID, folder_id: UUID, request: FolderUpdate
    ) -> ServiceResult[Folder]:
        """Rename and/or move a folder.

        Moving under itself or one of its descendants is rejected with
        INVALID_PARENT, so the folder graph stays a forest.
        """
        changes = request.model_dump(exclude_unset=True)
        if changes.get("name") is None:
            changes.pop("name", None)

        async with transaction(self.session):
            folder = await self.folder_repo.get_by_id(folder_id)
            if folder is None:
                return Failure.NOT_FOUND

            if not await self.permissions.can_access_folder(user_id, workspace_id, folder_id):
                return Failure.NO_PERMISSION

            new_parent = changes.get("parent_id")
            if new_parent is not None:
                if not await self.folder_repo.exists_in_workspace(new_parent, workspace_id):
                    return Failure.NOT_FOUND
                if folder_id in await self.folder_repo.ancestor_ids(new_parent):
                    return Failure.INVALID_PARENT

            if changes:
                folder = await self.folder_repo.update(folder, changes)

        logger.info("Folder updated", extra={"folder_id": str(folder_id), "fields": sorted(changes)})
        return Ok(folder)

    async def delete_folder(
        self, user_id: UUID, workspace_id: UUID, folder_id: UUID
    ) -> ServiceResult[None]:
        async with transaction(self.session):
            if await self.folder_repo.get_by_id(folder_id) is None:
                return Failure.NOT_FOUND

            if not await self.permissions.can_access_folder(user_id, workspace_id, folder_id):
                return Failure.NO_PERMISSION

            await self.folder_repo.delete(folder_id)

        logger.info("Folder deleted", extra={"folder_id": str(folder_id)})
        return Ok(None)
