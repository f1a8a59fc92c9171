"""Server repository for database operations."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.server import Server
from ..schemas.common import PaginationQuery
from .pagination import paginate


class ServerRepository:
    """Repository for registered servers."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, server_id: UUID) -> Optional[Server]:
        stmt = select(Server).where(Server.id == server_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_name(self, user_id: UUID, name: str) -> Optional[Server]:
        stmt = select(Server).where(Server.user_id == user_id, Server.name == name)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_user(self, user_id: UUID, query: PaginationQuery) -> List[Server]:
        return await paginate(self.session, Server, select(Server), Server.user_id == user_id, query)

    async def create(self, server_data: dict) -> Server:
        server = Server(**server_data)
        self.session.add(server)
        await self.session.flush()
        await self.session.refresh(server)
        return server

    async def update(self, server: Server, update_data: dict) -> Server:
        for key, value in update_data.items():
            setattr(server, key, value)
        await self.session.flush()
        await self.session.refresh(server)
        return server

    async def delete(self, server: Server) -> None:
        await self.session.delete(server)
        await self.session.flush()
