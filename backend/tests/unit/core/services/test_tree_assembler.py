"""Unit tests for the folder tree assembler."""

from uuid import uuid4

from worknest.core.schemas.workspace import PublicFolder
from worknest.core.services.tree_assembler import (
    FolderNode,
    FolderRow,
    assemble_forest,
    flatten_notes,
    iter_depth_first,
    name_sort_key,
    to_public_folder,
)

WS = uuid4()


def row(folder_id, name, parent_id=None, depth=0, note_id=None, note_name=None):
    return FolderRow(
        id=folder_id,
        workspace_id=WS,
        parent_id=parent_id,
        name=name,
        depth=depth,
        note_id=note_id,
        note_name=note_name,
        note_folder_id=folder_id if note_id else None,
        note_workspace_id=WS if note_id else None,
    )


def test_empty_rows_give_empty_forest():
    assert assemble_forest([]) == []
    assert flatten_notes([]) == []


def test_folder_repeated_once_per_note_is_deduplicated():
    folder = uuid4()
    n1, n2, n3 = uuid4(), uuid4(), uuid4()
    rows = [
        row(folder, "Inbox", note_id=n1, note_name="b"),
        row(folder, "Inbox", note_id=n2, note_name="a"),
        row(folder, "Inbox", note_id=n3, note_name="C"),
    ]

    forest = assemble_forest(rows)

    assert len(forest) == 1
    assert [n.name for n in forest[0].notes] == ["a", "b", "C"]
    assert {n.folder_id for n in forest[0].notes} == {folder}
    assert [n.id for n in flatten_notes(rows)] == [n1, n2, n3]


def test_nested_chain_is_rebuilt_at_every_depth():
    ids = [uuid4() for _ in range(12)]
    rows = [
        row(folder_id, f"level-{depth}", parent_id=ids[depth - 1] if depth else None, depth=depth)
        for depth, folder_id in enumerate(ids)
    ]

    forest = assemble_forest(rows)

    assert len(forest) == 1
    node = forest[0]
    for depth, folder_id in enumerate(ids):
        assert node.id == folder_id
        assert node.depth == depth
        if depth < len(ids) - 1:
            assert len(node.children) == 1
            node = node.children[0]
    assert node.children == []


def test_rows_in_any_order_give_the_same_tree():
    root, child, grandchild = uuid4(), uuid4(), uuid4()
    rows = [
        row(root, "root"),
        row(child, "child", parent_id=root, depth=1),
        row(grandchild, "grandchild", parent_id=child, depth=2),
    ]

    forward = assemble_forest(rows)
    backward = assemble_forest(list(reversed(rows)))

    assert forward == backward
    assert [n.id for n in iter_depth_first(forward)] == [root, child, grandchild]


def test_siblings_sorted_case_insensitively():
    parent = uuid4()
    rows = [row(parent, "parent")] + [
        row(uuid4(), name, parent_id=parent, depth=1) for name in ["beta", "Alpha", "gamma", "alpha"]
    ]

    forest = assemble_forest(rows)

    names = [child.name for child in forest[0].children]
    assert names == ["alpha", "Alpha", "beta", "gamma"]


def test_roots_sorted_by_name():
    rows = [row(uuid4(), name) for name in ["Zeta", "émile", "Eve"]]
    assert [n.name for n in assemble_forest(rows)] == ["émile", "Eve", "Zeta"]


def test_orphaned_folder_becomes_root():
    missing_parent = uuid4()
    orphan = uuid4()
    forest = assemble_forest([row(orphan, "orphan", parent_id=missing_parent, depth=3)])
    assert [n.id for n in forest] == [orphan]


def test_assembly_is_idempotent():
    root, child = uuid4(), uuid4()
    rows = [
        row(root, "root", note_id=uuid4(), note_name="n1"),
        row(child, "child", parent_id=root, depth=1),
    ]
    assert assemble_forest(rows) == assemble_forest(rows)


def test_name_sort_key_breaks_ties_by_id():
    a, b = uuid4(), uuid4()
    assert (name_sort_key("same", a) < name_sort_key("same", b)) == (str(a) < str(b))


class TestPublicProjection:
    def test_full_node_is_projected_recursively(self):
        root, child = uuid4(), uuid4()
        note = uuid4()
        forest = assemble_forest(
            [
                row(root, "root", note_id=note, note_name="readme"),
                row(child, "child", parent_id=root, depth=1),
            ]
        )

        public = to_public_folder(forest[0])

        assert isinstance(public, PublicFolder)
        assert public.id == root
        assert [n.id for n in public.notes] == [note]
        assert [c.id for c in public.children] == [child]
        assert public.children[0].children == []

    def test_plain_folder_row_falls_back_to_minimal_shape(self):
        folder_id = uuid4()
        plain = {"id": folder_id, "name": "bare", "workspace_id": WS}

        public = to_public_folder(plain)

        assert public.model_dump() == {"id": folder_id, "name": "bare", "notes": [], "children": []}

    def test_fallback_applies_per_child(self):
        parent = FolderNode(id=uuid4(), name="parent", workspace_id=WS, parent_id=None, depth=0)
        bare_child = {"id": uuid4(), "name": "bare"}
        parent.children.append(bare_child)

        public = to_public_folder(parent)

        assert public.children[0].name == "bare"
        assert public.children[0].notes == []

    def test_wire_shape_is_camel_case(self):
        folder_id = uuid4()
        public = to_public_folder({"id": folder_id, "name": "x"})
        assert set(public.model_dump(by_alias=True)) == {"id", "name", "notes", "children"}


def test_lowercase_sorts_before_uppercase_on_ties():
    assert sorted(["b", "A", "a"], key=name_sort_key) == ["a", "A", "b"]
