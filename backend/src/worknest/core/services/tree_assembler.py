"""Folder tree assembly.

The recursive folder query returns one row per (folder, note) pair: a
folder with three notes appears three times, a folder without notes once
with empty note columns. ``assemble_forest`` turns those rows back into
nested nodes, and ``to_public_folder`` projects any folder-like object to
the public shape.

Nodes only reference their parent by id. The tree is linked from an
id -> node map, never from ORM relationships.
"""

import unicodedata
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, ValidationError

from ..schemas.workspace import PublicFolder, PublicNote


@dataclass(frozen=True)
class FolderRow:
    """One row of the recursive folder query."""

    id: UUID
    workspace_id: UUID
    parent_id: Optional[UUID]
    name: str
    depth: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    note_id: Optional[UUID] = None
    note_name: Optional[str] = None
    note_folder_id: Optional[UUID] = None
    note_workspace_id: Optional[UUID] = None
    note_created_at: Optional[datetime] = None
    note_updated_at: Optional[datetime] = None


@dataclass
class NoteNode:
    id: UUID
    name: str
    workspace_id: UUID
    folder_id: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class FolderNode:
    id: UUID
    name: str
    workspace_id: UUID
    parent_id: Optional[UUID]
    depth: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    notes: List[NoteNode] = field(default_factory=list)
    children: List["FolderNode"] = field(default_factory=list)


def name_sort_key(name: str, ident: Any = "") -> tuple:
    """Case and accent insensitive ordering, lowercase before uppercase on ties, then id."""
    decomposed = unicodedata.normalize("NFKD", name)
    folded = "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()
    return (folded, name.swapcase(), str(ident))


def _note_from_row(row: FolderRow) -> NoteNode:
    return NoteNode(
        id=row.note_id,
        name=row.note_name or "",
        workspace_id=row.note_workspace_id or row.workspace_id,
        folder_id=row.note_folder_id or row.id,
        created_at=row.note_created_at,
        updated_at=row.note_updated_at,
    )


def sort_forest(roots: List[FolderNode]) -> None:
    """Sort roots, then every node's children and notes, in place."""
    roots.sort(key=lambda n: name_sort_key(n.name, n.id))
    stack = list(roots)
    seen = set()
    while stack:
        node = stack.pop()
        if node.id in seen:
            continue
        seen.add(node.id)
        node.children.sort(key=lambda n: name_sort_key(n.name, n.id))
        node.notes.sort(key=lambda n: name_sort_key(n.name, n.id))
        stack.extend(node.children)


def assemble_forest(rows: Iterable[FolderRow]) -> List[FolderNode]:
    """Rebuild the folder forest from flat rows.

    1. one node per distinct folder id, in row order
    2. attach every non-null note to its folder
    3. link each node under its parent, parentless (or orphaned) nodes are roots
    4. sort siblings and notes by name at every level
    """
    rows = list(rows)
    nodes: Dict[UUID, FolderNode] = {}

    for row in rows:
        if row.id not in nodes:
            nodes[row.id] = FolderNode(
                id=row.id,
                name=row.name,
                workspace_id=row.workspace_id,
                parent_id=row.parent_id,
                depth=row.depth,
                created_at=row.created_at,
                updated_at=row.updated_at,
            )

    for row in rows:
        if row.note_id is not None:
            nodes[row.id].notes.append(_note_from_row(row))

    roots: List[FolderNode] = []
    for node in nodes.values():
        parent = nodes.get(node.parent_id) if node.parent_id is not None else None
        if parent is not None:
            parent.children.append(node)
        else:
            roots.append(node)

    sort_forest(roots)
    return roots


def flatten_notes(rows: Iterable[FolderRow]) -> List[NoteNode]:
    """Every note carried by the rows, in row order."""
    return [_note_from_row(row) for row in rows if row.note_id is not None]


def iter_depth_first(roots: Iterable[FolderNode]):
    """Pre-order traversal of a forest."""
    stack = list(reversed(list(roots)))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


# Public projection


class _NoteShape(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    workspace_id: UUID


class _FolderShape(BaseModel):
    """Full folder shape. Anything missing notes or children fails it."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    workspace_id: UUID
    notes: List[_NoteShape]
    children: List[Any]


def _get(obj: Any, key: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(key)
    return getattr(obj, key, None)


def to_public_note(note: Any) -> PublicNote:
    return PublicNote(id=_get(note, "id"), name=_get(note, "name"))


def to_public_folder(folder: Any) -> PublicFolder:
    """Project a folder node, ORM row or dict to the public shape.

    Objects that don't carry the full shape (e.g. a plain folder row with
    no notes/children) fall back to {id, name, notes: [], children: []}.
    Children are projected one by one, so the fallback applies per node.
    """
    try:
        shape = _FolderShape.model_validate(folder)
    except ValidationError:
        return PublicFolder(id=_get(folder, "id"), name=_get(folder, "name"), notes=[], children=[])

    return PublicFolder(
        id=shape.id,
        name=shape.name,
        notes=[PublicNote(id=n.id, name=n.name) for n in shape.notes],
        children=[to_public_folder(child) for child in shape.children],
    )
