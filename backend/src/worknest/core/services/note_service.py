"""Note service implementation."""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ...database import transaction
from ..logging import get_logger
from ..models.workspace import Note
from ..repositories.folder_repository import NoteRepository
from ..schemas.workspace import NoteCreate, NoteUpdate
from .permission_service import PermissionService
from .results import Failure, Ok, ServiceResult

logger = get_logger("note")


class NoteService:
    """Note CRUD. A note always stays in the workspace it was created in."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.note_repo = NoteRepository(session)
        self.permissions = PermissionService(session)

    async def create_note(
        self, user_id: UUID, workspace_id: UUID, request: NoteCreate
    ) -> ServiceResult[Note]:
        async with transaction(self.session):
            if not await self.permissions.can_access_folder(user_id, workspace_id, request.folder_id):
                return Failure.NO_PERMISSION

            note = await self.note_repo.create(
                {"workspace_id": workspace_id, "folder_id": request.folder_id, "name": request.name}
            )

        logger.info("Note created", extra={"note_id": str(note.id), "workspace_id": str(workspace_id)})
        return Ok(note)

    async def update_note(
        self, user_id: UUID, workspace_id: UUID, note_id: UUID, request: NoteUpdate
    ) -> ServiceResult[Note]:
        """Rename and/or move a note between folders of its workspace."""
        changes = request.model_dump(exclude_unset=True)
        if changes.get("name") is None:
            changes.pop("name", None)

        async with transaction(self.session):
            note = await self.note_repo.get_by_id(note_id)
            if note is None:
                return Failure.NOT_FOUND

            if not await self.permissions.can_access_note(user_id, workspace_id, note_id):
                return Failure.NO_PERMISSION

            target_folder = changes.get("folder_id")
            if target_folder is not None and not await self.permissions.can_access_folder(
                user_id, workspace_id, target_folder
            ):
                return Failure.NO_PERMISSION

            if changes:
                note = await self.note_repo.update(note, changes)

        logger.info("Note updated", extra={"note_id": str(note_id), "fields": sorted(changes)})
        return Ok(note)

    async def delete_note(self, user_id: UUID, workspace_id: UUID, note_id: UUID) -> ServiceResult[None]:
        async with transaction(self.session):
            if await self.note_repo.get_by_id(note_id) is None:
                return Failure.NOT_FOUND

            if not await self.permissions.can_access_note(user_id, workspace_id, note_id):
                return Failure.NO_PERMISSION

            await self.note_repo.delete(note_id)

        logger.info("Note deleted", extra={"note_id": str(note_id)})
        return Ok(None)
