"""User profile endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ApiError
from ..core.schemas.auth import PublicUser, UserUpdate
from ..core.schemas.common import error_responses
from ..core.services import Failure, UserService, unwrap
from ..database import get_db_session
from ..middleware.auth import get_current_user_id

router = APIRouter(prefix="/user", tags=["user"], responses=error_responses(401, 404))


def _errors():
    return {Failure.NOT_FOUND: ApiError(status.HTTP_404_NOT_FOUND, "user_not_found", "The user does not exist.")}


@router.get("", response_model=PublicUser)
async def get_current_user(
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Get the caller's profile."""
    user_service = UserService(session)
    return unwrap(await user_service.get_user(current_user_id), _errors())


@router.patch("", response_model=PublicUser)
async def update_current_user(
    request: UserUpdate,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Update the caller's name and/or image."""
    user_service = UserService(session)
    return unwrap(await user_service.update_user(current_user_id, request), _errors())
