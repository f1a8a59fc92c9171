"""Server registry service."""

import asyncio
from typing import Awaitable, Callable, List, Optional
from uuid import UUID

import aiohttp
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ...database import transaction
from ..logging import get_logger
from ..models.server import Server
from ..repositories.server_repository import ServerRepository
from ..schemas.common import PaginationQuery
from ..schemas.server import ServerCreate, ServerUpdate
from .results import Failure, Ok, ServiceResult

logger = get_logger("server")

HealthProbe = Callable[[str], Awaitable[bool]]


def health_url(url: str) -> str:
    return url.rstrip("/") + "/health"


async def check_server_health(url: str) -> bool:
    """GET <url>/health once. Only a 200 counts as reachable."""
    target = health_url(url)
    try:
        async with aiohttp.ClientSession() as session:
            async with session.get(target) as resp:
                return resp.status == 200
    except (aiohttp.ClientError, asyncio.TimeoutError, OSError, ValueError) as exc:
        logger.warning("Server health probe failed", extra={"url": target, "error": str(exc)})
        return False


class ServerService:
    """CRUD for a user's registered servers."""

    def __init__(self, session: AsyncSession, probe: Optional[HealthProbe] = None):
        self.session = session
        self.server_repo = ServerRepository(session)
        self.probe = probe or check_server_health

    async def list_servers(self, user_id: UUID, query: PaginationQuery) -> List[Server]:
        return await self.server_repo.list_for_user(user_id, query)

    async def get_server(self, user_id: UUID, server_id: UUID) -> ServiceResult[Server]:
        """Own server only, foreign servers are reported as NOT_FOUND."""
        server = await self.server_repo.get_by_id(server_id)
        if server is None or server.user_id != user_id:
            return Failure.NOT_FOUND
        return Ok(server)

    async def create_server(self, user_id: UUID, request: ServerCreate) -> ServiceResult[Server]:
        """Probe the server, then store it under a name unused by this user."""
        url = str(request.url)
        if not await self.probe(url):
            return Failure.UNREACHABLE

        try:
            async with transaction(self.session):
                if await self.server_repo.get_by_name(user_id, request.name) is not None:
                    return Failure.ALREADY_EXISTS
                server = await self.server_repo.create(
                    {"user_id": user_id, "name": request.name, "url": url}
                )
        except IntegrityError:
            logger.info("Server name taken concurrently", extra={"user_id": str(user_id)})
            return Failure.ALREADY_EXISTS

        logger.info("Server registered", extra={"server_id": str(server.id)})
        return Ok(server)

    async def update_server(
        self, user_id: UUID, server_id: UUID, request: ServerUpdate
    ) -> ServiceResult[Server]:
        changes = {}
        if request.url is not None:
            changes["url"] = str(request.url)

        async with transaction(self.session):
            server = await self.server_repo.get_by_id(server_id)
            if server is None:
                return Failure.NOT_FOUND
            if server.user_id != user_id:
                return Failure.NO_PERMISSION
            if changes:
                server = await self.server_repo.update(server, changes)

        return Ok(server)

    async def delete_server(self, user_id: UUID, server_id: UUID) -> ServiceResult[None]:
        async with transaction(self.session):
            server = await self.server_repo.get_by_id(server_id)
            if server is None:
                return Failure.NOT_FOUND
            if server.user_id != user_id:
                return Failure.NO_PERMISSION
            await self.server_repo.delete(server)

        logger.info("Server deleted", extra={"server_id": str(server_id)})
        return Ok(None)
