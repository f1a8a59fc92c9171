"""Folder API endpoints, nested under a workspace."""

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ApiError
from ..core.schemas.common import error_responses
from ..core.schemas.workspace import FolderCreate, FolderUpdate, PublicFolder
from ..core.services import Failure, FolderService, unwrap
from ..core.services.tree_assembler import to_public_folder
from ..database import get_db_session
from ..middleware.auth import get_current_user_id

router = APIRouter(
    prefix="/workspace/{workspace_id}/folder",
    tags=["folder"],
    responses=error_responses(401, 403, 404),
)


def _errors():
    return {
        Failure.NOT_FOUND: ApiError(
            status.HTTP_404_NOT_FOUND, "folder_not_found", "The folder does not exist."
        ),
        Failure.NO_PERMISSION: ApiError(
            status.HTTP_403_FORBIDDEN, "no_permission", "You do not have access to this folder."
        ),
        Failure.INVALID_PARENT: ApiError(
            status.HTTP_400_BAD_REQUEST,
            "invalid_parent_folder",
            "A folder cannot be moved inside itself or its sub-folders.",
        ),
    }


@router.post("", response_model=PublicFolder, status_code=status.HTTP_201_CREATED)
async def create_folder(
    workspace_id: UUID,
    request: FolderCreate,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Create a folder, at the root or under a parent folder."""
    folder_service = FolderService(session)
    folder = unwrap(await folder_service.create_folder(current_user_id, workspace_id, request), _errors())
    return to_public_folder(folder)


@router.patch("/{folder_id}", response_model=PublicFolder, responses=error_responses(400))
async def update_folder(
    workspace_id: UUID,
    folder_id: UUID,
    request: FolderUpdate,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Rename or move a folder."""
    folder_service = FolderService(session)
    result = await folder_service.update_folder(current_user_id, workspace_id, folder_id, request)
    return to_public_folder(unwrap(result, _errors()))


@router.delete("/{folder_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_folder(
    workspace_id: UUID,
    folder_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Delete a folder and its sub-folders."""
    folder_service = FolderService(session)
    unwrap(await folder_service.delete_folder(current_user_id, workspace_id, folder_id), _errors())
    return Response(status_code=status.HTTP_204_NO_CONTENT)
