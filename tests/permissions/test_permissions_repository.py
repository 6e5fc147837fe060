from __future__ import annotations

from uuid import uuid4

import pytest  # type: ignore[import-not-found]
from sqlalchemy.dialects import postgresql  # type: ignore[import-not-found]

from taskhub.permissions.models import ResourceKind
from taskhub.permissions.repository import PermissionsRepository

pytestmark = pytest.mark.anyio


def _sql(stmt) -> tuple[str, dict]:  # type: ignore[no-untyped-def]
    compiled = stmt.compile(dialect=postgresql.dialect())
    return " ".join(str(compiled).split()), compiled.params


async def test_get_project_skips_soft_deleted_rows(executor) -> None:  # type: ignore[no-untyped-def]
    repo = PermissionsRepository(executor=executor)
    await repo.get_resource(None, kind=ResourceKind.PROJECT, resource_id=uuid4())

    sql, _ = _sql(executor.statements[-1])
    assert "FROM projects" in sql
    assert "projects.id = " in sql
    assert "projects.deleted_at IS NULL" in sql


@pytest.mark.parametrize(
    "kind,table",
    [(ResourceKind.SPACE, "spaces"), (ResourceKind.FOLDER, "folders"),
     (ResourceKind.DASHBOARD, "dashboards")],
)
async def test_get_other_resources_has_no_soft_delete_filter(executor, kind, table) -> None:  # type: ignore[no-untyped-def]
    repo = PermissionsRepository(executor=executor)
    await repo.get_resource(None, kind=kind, resource_id=uuid4())

    sql, _ = _sql(executor.statements[-1])
    assert f"FROM {table}" in sql
    assert "deleted_at" not in sql


async def test_membership_lookup_matches_resource_and_user(executor) -> None:  # type: ignore[no-untyped-def]
    repo = PermissionsRepository(executor=executor)
    resource_id, user_id = uuid4(), uuid4()
    await repo.get_membership_role(
        None, kind=ResourceKind.FOLDER, resource_id=resource_id, user_id=user_id
    )

    sql, params = _sql(executor.statements[-1])
    assert sql.startswith("SELECT folder_members.role FROM folder_members")
    assert "folder_members.resource_id = " in sql
    assert "folder_members.user_id = " in sql
    assert resource_id in params.values()
    assert user_id in params.values()


async def test_upsert_membership_updates_role_on_conflict(executor) -> None:  # type: ignore[no-untyped-def]
    repo = PermissionsRepository(executor=executor)
    resource_id, user_id = uuid4(), uuid4()
    await repo.upsert_membership(
        None, kind=ResourceKind.SPACE, resource_id=resource_id, user_id=user_id, role="editor"
    )

    sql, params = _sql(executor.statements[-1])
    assert sql.startswith("INSERT INTO space_members")
    assert "ON CONFLICT (resource_id, user_id) DO UPDATE SET role = " in sql
    assert resource_id in params.values()
    assert user_id in params.values()
    assert "editor" in params.values()
