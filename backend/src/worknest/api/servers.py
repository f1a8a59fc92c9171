"""Server registry API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ApiError
from ..core.schemas.common import Page, PaginationQuery, error_responses
from ..core.schemas.server import PublicServer, ServerCreate, ServerUpdate
from ..core.services import Failure, ServerService, unwrap
from ..database import get_db_session
from ..middleware.auth import get_current_user_id
from .deps import pagination_params

router = APIRouter(prefix="/server", tags=["server"], responses=error_responses(401))


def _errors():
    return {
        Failure.NOT_FOUND: ApiError(
            status.HTTP_404_NOT_FOUND, "server_not_found", "The server does not exist."
        ),
        Failure.NO_PERMISSION: ApiError(
            status.HTTP_403_FORBIDDEN, "no_permission", "You do not have access to this server."
        ),
        Failure.ALREADY_EXISTS: ApiError(
            status.HTTP_409_CONFLICT,
            "server_already_exists",
            "A server with this name already exists.",
        ),
        Failure.UNREACHABLE: ApiError(
            status.HTTP_400_BAD_REQUEST,
            "invalid_server_url",
            "The server did not answer its health check.",
        ),
    }


@router.get("", response_model=Page[PublicServer])
async def list_servers(
    query: PaginationQuery = Depends(pagination_params),
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """List the caller's servers."""
    server_service = ServerService(session)
    servers = await server_service.list_servers(current_user_id, query)
    return Page[PublicServer].create(
        items=[PublicServer.model_validate(server) for server in servers],
        ids=[str(server.id) for server in servers],
        limit=query.limit,
    )


@router.post(
    "",
    response_model=PublicServer,
    status_code=status.HTTP_201_CREATED,
    responses=error_responses(400, 409),
)
async def create_server(
    request: ServerCreate,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Register a server after checking that its health endpoint answers."""
    server_service = ServerService(session)
    return unwrap(await server_service.create_server(current_user_id, request), _errors())


@router.get("/{server_id}", response_model=PublicServer, responses=error_responses(404))
async def get_server(
    server_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    server_service = ServerService(session)
    return unwrap(await server_service.get_server(current_user_id, server_id), _errors())


@router.patch("/{server_id}", response_model=PublicServer, responses=error_responses(403, 404))
async def update_server(
    server_id: UUID,
    request: ServerUpdate,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Change a server's URL."""
    server_service = ServerService(session)
    return unwrap(await server_service.update_server(current_user_id, server_id, request), _errors())


@router.delete("/{server_id}", status_code=status.HTTP_204_NO_CONTENT, responses=error_responses(403, 404))
async def delete_server(
    server_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    server_service = ServerService(session)
    unwrap(await server_service.delete_server(current_user_id, server_id), _errors())
    return Response(status_code=status.HTTP_204_NO_CONTENT)
