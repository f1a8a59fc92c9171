"""Cursor (keyset) pagination shared by the list queries."""

from typing import Optional, Type
from uuid import UUID

from sqlalchemy import Select, and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import BaseModel
from ..schemas.common import PaginationQuery


def parse_cursor(cursor: Optional[str]) -> Optional[UUID]:
    """Cursor ids are UUID strings, anything else is None."""
    try:
        return UUID(cursor)
    except (TypeError, ValueError):
        return None


async def paginate(
    session: AsyncSession,
    model: Type[BaseModel],
    stmt: Select,
    owner_filter,
    query: PaginationQuery,
) -> list:
    """Apply ordering, cursor and limit to ``stmt``.

    Items are ordered by (sort column, id) in the requested direction. With
    a cursor the page starts strictly after that item. A cursor that is
    unknown or outside ``owner_filter`` yields an empty page.
    """
    column = getattr(model, query.sort_column)
    descending = query.order_by == "desc"

    if query.cursor is not None:
        cursor_id = parse_cursor(query.cursor)
        if cursor_id is None:
            return []
        anchor = (
            await session.execute(
                select(column, model.id).where(model.id == cursor_id, owner_filter)
            )
        ).first()
        if anchor is None:
            return []
        anchor_value, anchor_id = anchor
        if descending:
            after = or_(column < anchor_value, and_(column == anchor_value, model.id < anchor_id))
        else:
            after = or_(column > anchor_value, and_(column == anchor_value, model.id > anchor_id))
        stmt = stmt.where(after)

    if descending:
        stmt = stmt.order_by(column.desc(), model.id.desc())
    else:
        stmt = stmt.order_by(column.asc(), model.id.asc())

    result = await session.execute(stmt.where(owner_filter).limit(query.limit))
    return list(result.scalars())
