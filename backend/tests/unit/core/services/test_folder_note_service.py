"""Unit tests for folder and note services and their permission checks."""

import uuid

import pytest
from sqlalchemy import func, select

from worknest.core.models import Folder, Note
from worknest.core.schemas.workspace import FolderCreate, FolderUpdate, NoteCreate, NoteUpdate
from worknest.core.services.folder_service import FolderService
from worknest.core.services.note_service import NoteService
from worknest.core.services.permission_service import PermissionService
from worknest.core.services.results import Failure, Ok


async def _count(session, model):
    return (await session.execute(select(func.count()).select_from(model))).scalar()


class TestPermissionService:
    async def test_workspace_owner_only(self, test_session, test_user, other_user, test_workspace):
        perms = PermissionService(test_session)
        assert await perms.can_access_workspace(test_user.id, test_workspace.id)
        assert not await perms.can_access_workspace(other_user.id, test_workspace.id)
        assert not await perms.can_access_workspace(test_user.id, uuid.uuid4())

    async def test_folder_must_live_in_workspace(self, test_session, factory, test_user, test_workspace):
        other_ws = await factory.workspace(test_user, "Other")
        folder = await factory.folder(other_ws, "elsewhere")
        perms = PermissionService(test_session)

        assert await perms.can_access_folder(test_user.id, other_ws.id, folder.id)
        assert not await perms.can_access_folder(test_user.id, test_workspace.id, folder.id)
        # no folder means the workspace itself
        assert await perms.can_access_folder(test_user.id, test_workspace.id, None)

    async def test_note_access(self, test_session, factory, test_user, other_user, test_workspace):
        note = await factory.note(test_workspace, "n")
        perms = PermissionService(test_session)
        assert await perms.can_access_note(test_user.id, test_workspace.id, note.id)
        assert not await perms.can_access_note(other_user.id, test_workspace.id, note.id)


class TestFolderService:
    async def test_create_root_and_child(self, test_session, test_user, test_workspace):
        svc = FolderService(test_session)
        root = await svc.create_folder(test_user.id, test_workspace.id, FolderCreate(name="root"))
        child = await svc.create_folder(
            test_user.id, test_workspace.id, FolderCreate(name="child", parent_id=root.value.id)
        )

        assert isinstance(child, Ok)
        assert child.value.parent_id == root.value.id
        assert child.value.workspace_id == test_workspace.id

    async def test_create_in_foreign_workspace_persists_nothing(
        self, test_session, other_user, test_workspace
    ):
        result = await FolderService(test_session).create_folder(
            other_user.id, test_workspace.id, FolderCreate(name="sneaky")
        )
        assert result is Failure.NO_PERMISSION
        assert await _count(test_session, Folder) == 0

    async def test_create_with_parent_from_another_workspace(
        self, test_session, factory, test_user, test_workspace
    ):
        other_ws = await factory.workspace(test_user, "Other")
        foreign_parent = await factory.folder(other_ws, "parent")

        result = await FolderService(test_session).create_folder(
            test_user.id, test_workspace.id, FolderCreate(name="x", parent_id=foreign_parent.id)
        )
        assert result is Failure.NOT_FOUND

    async def test_folder_names_are_not_unique(self, test_session, test_user, test_workspace):
        svc = FolderService(test_session)
        for _ in range(2):
            assert isinstance(
                await svc.create_folder(test_user.id, test_workspace.id, FolderCreate(name="dup")), Ok
            )

    async def test_rename_and_move(self, test_session, factory, test_user, test_workspace):
        a = await factory.folder(test_workspace, "a")
        b = await factory.folder(test_workspace, "b")
        svc = FolderService(test_session)

        renamed = await svc.update_folder(test_user.id, test_workspace.id, a.id, FolderUpdate(name="A"))
        assert renamed.value.name == "A"

        moved = await svc.update_folder(test_user.id, test_workspace.id, a.id, FolderUpdate(parent_id=b.id))
        assert moved.value.parent_id == b.id
        assert moved.value.name == "A"

        to_root = await svc.update_folder(
            test_user.id, test_workspace.id, a.id, FolderUpdate.model_validate({"parentId": None})
        )
        assert to_root.value.parent_id is None

    async def test_update_error_order(self, test_session, factory, test_user, other_user, test_workspace):
        folder = await factory.folder(test_workspace, "f")
        svc = FolderService(test_session)

        assert (
            await svc.update_folder(test_user.id, test_workspace.id, uuid.uuid4(), FolderUpdate(name="x"))
            is Failure.NOT_FOUND
        )
        assert (
            await svc.update_folder(other_user.id, test_workspace.id, folder.id, FolderUpdate(name="x"))
            is Failure.NO_PERMISSION
        )
        assert (
            await svc.update_folder(
                test_user.id, test_workspace.id, folder.id, FolderUpdate(parent_id=uuid.uuid4())
            )
            is Failure.NOT_FOUND
        )

    @pytest.mark.parametrize("target", ["self", "child", "grandchild"])
    async def test_move_into_own_subtree_is_rejected(
        self, test_session, factory, test_user, test_workspace, target
    ):
        root = await factory.folder(test_workspace, "root")
        child = await factory.folder(test_workspace, "child", root)
        grandchild = await factory.folder(test_workspace, "grandchild", child)
        new_parent = {"self": root, "child": child, "grandchild": grandchild}[target]

        result = await FolderService(test_session).update_folder(
            test_user.id, test_workspace.id, root.id, FolderUpdate(parent_id=new_parent.id)
        )

        assert result is Failure.INVALID_PARENT
        parent_id = (
            await test_session.execute(select(Folder.parent_id).where(Folder.id == root.id))
        ).scalar()
        assert parent_id is None

    async def test_delete_cascades_and_unfiles_notes(
        self, test_session, factory, test_user, test_workspace
    ):
        root = await factory.folder(test_workspace, "root")
        child = await factory.folder(test_workspace, "child", root)
        note = await factory.note(test_workspace, "n", child)

        result = await FolderService(test_session).delete_folder(test_user.id, test_workspace.id, root.id)

        assert isinstance(result, Ok)
        assert await _count(test_session, Folder) == 0
        row = (
            await test_session.execute(select(Note.folder_id, Note.workspace_id).where(Note.id == note.id))
        ).one()
        assert row.folder_id is None
        assert row.workspace_id == test_workspace.id

    async def test_delete_error_order(self, test_session, factory, test_user, other_user, test_workspace):
        folder = await factory.folder(test_workspace, "f")
        svc = FolderService(test_session)

        assert await svc.delete_folder(test_user.id, test_workspace.id, uuid.uuid4()) is Failure.NOT_FOUND
        assert await svc.delete_folder(other_user.id, test_workspace.id, folder.id) is Failure.NO_PERMISSION
        assert await _count(test_session, Folder) == 1


class TestNoteService:
    async def test_create_unfiled_and_filed(self, test_session, factory, test_user, test_workspace):
        folder = await factory.folder(test_workspace, "f")
        svc = NoteService(test_session)

        loose = await svc.create_note(test_user.id, test_workspace.id, NoteCreate(name="loose"))
        filed = await svc.create_note(
            test_user.id, test_workspace.id, NoteCreate(name="filed", folder_id=folder.id)
        )

        assert loose.value.folder_id is None
        assert filed.value.folder_id == folder.id

    async def test_create_in_foreign_folder_or_workspace(
        self, test_session, factory, test_user, other_user, test_workspace
    ):
        other_ws = await factory.workspace(test_user, "Other")
        foreign_folder = await factory.folder(other_ws, "f")
        svc = NoteService(test_session)

        assert (
            await svc.create_note(other_user.id, test_workspace.id, NoteCreate(name="x"))
            is Failure.NO_PERMISSION
        )
        assert (
            await svc.create_note(
                test_user.id, test_workspace.id, NoteCreate(name="x", folder_id=foreign_folder.id)
            )
            is Failure.NO_PERMISSION
        )
        assert await _count(test_session, Note) == 0

    async def test_update_moves_between_folders(self, test_session, factory, test_user, test_workspace):
        a = await factory.folder(test_workspace, "a")
        b = await factory.folder(test_workspace, "b")
        note = await factory.note(test_workspace, "n", a)
        svc = NoteService(test_session)

        moved = await svc.update_note(test_user.id, test_workspace.id, note.id, NoteUpdate(folder_id=b.id))
        assert moved.value.folder_id == b.id
        assert moved.value.workspace_id == test_workspace.id

        unfiled = await svc.update_note(
            test_user.id, test_workspace.id, note.id, NoteUpdate.model_validate({"folderId": None})
        )
        assert unfiled.value.folder_id is None

    async def test_update_error_order(self, test_session, factory, test_user, other_user, test_workspace):
        other_ws = await factory.workspace(test_user, "Other")
        foreign_folder = await factory.folder(other_ws, "f")
        note = await factory.note(test_workspace, "n")
        svc = NoteService(test_session)

        assert (
            await svc.update_note(test_user.id, test_workspace.id, uuid.uuid4(), NoteUpdate(name="x"))
            is Failure.NOT_FOUND
        )
        assert (
            await svc.update_note(other_user.id, test_workspace.id, note.id, NoteUpdate(name="x"))
            is Failure.NO_PERMISSION
        )
        assert (
            await svc.update_note(
                test_user.id, test_workspace.id, note.id, NoteUpdate(folder_id=foreign_folder.id)
            )
            is Failure.NO_PERMISSION
        )

    async def test_delete(self, test_session, factory, test_user, other_user, test_workspace):
        note = await factory.note(test_workspace, "n")
        svc = NoteService(test_session)

        assert await svc.delete_note(other_user.id, test_workspace.id, note.id) is Failure.NO_PERMISSION
        assert isinstance(await svc.delete_note(test_user.id, test_workspace.id, note.id), Ok)
        assert await svc.delete_note(test_user.id, test_workspace.id, note.id) is Failure.NOT_FOUND
