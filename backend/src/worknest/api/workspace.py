"""Workspace API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ApiError
from ..core.schemas.common import Page, PaginationQuery, error_responses
from ..core.schemas.workspace import PublicWorkspace, WorkspaceCreate
from ..core.services import Failure, WorkspaceService, to_public_workspace, unwrap
from ..database import get_db_session
from ..middleware.auth import get_current_user_id
from .deps import pagination_params

router = APIRouter(prefix="/workspace", tags=["workspace"], responses=error_responses(401))


@router.get("", response_model=Page[PublicWorkspace])
async def list_workspaces(
    query: PaginationQuery = Depends(pagination_params),
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """List the caller's workspaces, one cursor page at a time."""
    workspace_service = WorkspaceService(session)
    views = await workspace_service.list_workspaces(current_user_id, query)
    return Page[PublicWorkspace].create(
        items=[to_public_workspace(view) for view in views],
        ids=[str(view.workspace.id) for view in views],
        limit=query.limit,
    )


@router.post(
    "",
    response_model=PublicWorkspace,
    status_code=status.HTTP_201_CREATED,
    responses=error_responses(400),
)
async def create_workspace(
    request: WorkspaceCreate,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Create a workspace."""
    workspace_service = WorkspaceService(session)
    result = await workspace_service.create_workspace(current_user_id, request)
    view = unwrap(
        result,
        {
            Failure.ALREADY_EXISTS: ApiError(
                status.HTTP_400_BAD_REQUEST,
                "workspace_already_exists",
                "A workspace with this name already exists.",
            )
        },
    )
    return to_public_workspace(view)


@router.get("/{workspace_id}", response_model=PublicWorkspace, responses=error_responses(404))
async def get_workspace(
    workspace_id: UUID,
    detailed: bool = Query(True, description="Return the nested folder tree"),
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Get one workspace, with its folder tree when detailed."""
    workspace_service = WorkspaceService(session)
    result = await workspace_service.get_workspace(current_user_id, workspace_id, detailed=detailed)
    view = unwrap(
        result,
        {
            Failure.NOT_FOUND: ApiError(
                status.HTTP_404_NOT_FOUND, "workspace_not_found", "The workspace does not exist."
            )
        },
    )
    return to_public_workspace(view)
