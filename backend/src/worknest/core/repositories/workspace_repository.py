"""Workspace repository, including the recursive folder tree query."""

from collections import defaultdict
from typing import Any, Dict, Iterable, List, Mapping, Optional
from uuid import UUID

from sqlalchemy import Integer, and_, exists, literal_column, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from ..models.workspace import Folder, Note, Workspace
from ..schemas.common import PaginationQuery
from .pagination import paginate


class WorkspaceRepository:
    """Repository for workspace database operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_owned(self, user_id: UUID, workspace_id: UUID) -> Optional[Workspace]:
        """Workspace by id, only if owned by user_id."""
        stmt = select(Workspace).where(Workspace.id == workspace_id, Workspace.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_name(self, user_id: UUID, name: str) -> Optional[Workspace]:
        stmt = select(Workspace).where(Workspace.user_id == user_id, Workspace.name == name)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def is_owned_by(self, user_id: UUID, workspace_id: UUID) -> bool:
        """True iff the workspace exists and belongs to user_id."""
        stmt = select(
            exists().where(Workspace.id == workspace_id, Workspace.user_id == user_id)
        )
        return bool((await self.session.execute(stmt)).scalar())

    async def create(self, workspace_data: dict) -> Workspace:
        workspace = Workspace(**workspace_data)
        self.session.add(workspace)
        await self.session.flush()
        await self.session.refresh(workspace)
        return workspace

    async def list_for_user(self, user_id: UUID, query: PaginationQuery) -> List[Workspace]:
        """One page of the user's workspaces."""
        return await paginate(
            self.session, Workspace, select(Workspace), Workspace.user_id == user_id, query
        )

    async def folders_by_workspace(self, workspace_ids: Iterable[UUID]) -> Dict[UUID, List[Folder]]:
        """All folders of the given workspaces, grouped by workspace id."""
        ids = list(workspace_ids)
        grouped: Dict[UUID, List[Folder]] = defaultdict(list)
        if not ids:
            return grouped
        stmt = (
            select(Folder)
            .where(Folder.workspace_id.in_(ids))
            .order_by(Folder.created_at, Folder.id)
        )
        for folder in (await self.session.execute(stmt)).scalars():
            grouped[folder.workspace_id].append(folder)
        return grouped

    async def notes_by_workspace(self, workspace_ids: Iterable[UUID]) -> Dict[UUID, List[Note]]:
        """All notes of the given workspaces, grouped by workspace id."""
        ids = list(workspace_ids)
        grouped: Dict[UUID, List[Note]] = defaultdict(list)
        if not ids:
            return grouped
        stmt = (
            select(Note)
            .where(Note.workspace_id.in_(ids))
            .order_by(Note.created_at, Note.id)
        )
        for note in (await self.session.execute(stmt)).scalars():
            grouped[note.workspace_id].append(note)
        return grouped

    async def fetch_folder_rows(self, workspace_id: UUID) -> List[Mapping[str, Any]]:
        """Walk the whole folder tree of a workspace in one query.

        Roots have depth 0. Every folder is left joined with its notes, so
        a folder appears once per note (or once with empty note columns).
        Rows are ordered by depth, folder name, then note name (nulls last).
        """
        tree = (
            select(
                Folder.id,
                Folder.workspace_id,
                Folder.parent_id,
                Folder.name,
                Folder.created_at,
                Folder.updated_at,
                literal_column("0", Integer).label("depth"),
            )
            .where(Folder.workspace_id == workspace_id, Folder.parent_id.is_(None))
            .cte("folder_tree", recursive=True)
        )

        child = aliased(Folder, name="child")
        tree = tree.union_all(
            select(
                child.id,
                child.workspace_id,
                child.parent_id,
                child.name,
                child.created_at,
                child.updated_at,
                (tree.c.depth + 1).label("depth"),
            )
            .select_from(child)
            .join(tree, child.parent_id == tree.c.id)
            .where(child.workspace_id == workspace_id)
        )

        stmt = (
            select(
                tree.c.id,
                tree.c.workspace_id,
                tree.c.parent_id,
                tree.c.name,
                tree.c.created_at,
                tree.c.updated_at,
                tree.c.depth,
                Note.id.label("note_id"),
                Note.name.label("note_name"),
                Note.folder_id.label("note_folder_id"),
                Note.workspace_id.label("note_workspace_id"),
                Note.created_at.label("note_created_at"),
                Note.updated_at.label("note_updated_at"),
            )
            .select_from(tree)
            .outerjoin(
                Note,
                and_(Note.folder_id == tree.c.id, Note.workspace_id == workspace_id),
            )
            .order_by(
                tree.c.depth,
                tree.c.name,
                tree.c.id,
                Note.name.asc().nulls_last(),
                Note.id,
            )
        )

        result = await self.session.execute(stmt)
        return [row._mapping for row in result]
