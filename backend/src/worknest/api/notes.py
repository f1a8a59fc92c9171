"""Note API endpoints, nested under a workspace."""

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ApiError
from ..core.schemas.common import error_responses
from ..core.schemas.workspace import NoteCreate, NoteUpdate, PublicNote
from ..core.services import Failure, NoteService, unwrap
from ..database import get_db_session
from ..middleware.auth import get_current_user_id

router = APIRouter(
    prefix="/workspace/{workspace_id}/note",
    tags=["note"],
    responses=error_responses(401, 403, 404),
)


def _errors():
    return {
        Failure.NOT_FOUND: ApiError(status.HTTP_404_NOT_FOUND, "not_found", "The note does not exist."),
        Failure.NO_PERMISSION: ApiError(
            status.HTTP_403_FORBIDDEN, "no_permission", "You do not have access to this note."
        ),
    }


@router.post("", response_model=PublicNote, status_code=status.HTTP_201_CREATED)
async def create_note(
    workspace_id: UUID,
    request: NoteCreate,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Create a note, unfiled or inside a folder."""
    note_service = NoteService(session)
    return unwrap(await note_service.create_note(current_user_id, workspace_id, request), _errors())


@router.patch("/{note_id}", response_model=PublicNote)
async def update_note(
    workspace_id: UUID,
    note_id: UUID,
    request: NoteUpdate,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Rename a note or move it to another folder."""
    note_service = NoteService(session)
    return unwrap(await note_service.update_note(current_user_id, workspace_id, note_id, request), _errors())


@router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_note(
    workspace_id: UUID,
    note_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Delete a note."""
    note_service = NoteService(session)
    unwrap(await note_service.delete_note(current_user_id, workspace_id, note_id), _errors())
    return Response(status_code=status.HTTP_204_NO_CONTENT)
