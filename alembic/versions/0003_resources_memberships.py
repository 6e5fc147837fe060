"""resources (spaces, folders, projects, dashboards) + membership tables

Revision ID: 0003_resources_memberships
Revises: 0002_password_resets
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa  # type: ignore[import-not-found]

from alembic import op

revision = "0003_resources_memberships"
down_revision = "0002_password_resets"
branch_labels = None
depends_on = None

# membership table -> resource table
MEMBERSHIP_TABLES = {
    "space_members": "spaces",
    "folder_members": "folders",
    "project_members": "projects",
    "dashboard_members": "dashboards",
}


def _owner_column() -> sa.Column:
    return sa.Column(
        "owner_id",
        sa.Uuid(),
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "spaces",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        _owner_column(),
        sa.Column("is_private", sa.Boolean(), server_default=sa.false(), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        "folders",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        _owner_column(),
        sa.Column(
            "space_id",
            sa.Uuid(),
            sa.ForeignKey("spaces.id", ondelete="SET NULL"),
            nullable=True,
        ),
        *_timestamps(),
    )
    op.create_table(
        "projects",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        _owner_column(),
        sa.Column(
            "folder_id",
            sa.Uuid(),
            sa.ForeignKey("folders.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "workspace_shared", sa.Boolean(), server_default=sa.false(), nullable=False
        ),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "dashboards",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        _owner_column(),
        sa.Column(
            "folder_id",
            sa.Uuid(),
            sa.ForeignKey("folders.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "workspace_shared", sa.Boolean(), server_default=sa.false(), nullable=False
        ),
        *_timestamps(),
    )
    for resource_table in ("spaces", "folders", "projects", "dashboards"):
        op.create_index(
            f"{resource_table}_owner_id_idx", resource_table, ["owner_id"], unique=False
        )

    for table, resource_table in MEMBERSHIP_TABLES.items():
        op.create_table(
            table,
            sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
            sa.Column(
                "resource_id",
                sa.Uuid(),
                sa.ForeignKey(f"{resource_table}.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column(
                "user_id",
                sa.Uuid(),
                sa.ForeignKey("users.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column("role", sa.Text(), nullable=False),
            sa.Column(
                "created_at",
                sa.DateTime(timezone=True),
                server_default=sa.text("now()"),
                nullable=False,
            ),
            sa.UniqueConstraint(
                "resource_id", "user_id", name=f"{table}_resource_user_unique"
            ),
        )
        op.create_index(f"{table}_user_id_idx", table, ["user_id"], unique=False)


def downgrade() -> None:
    for table in reversed(list(MEMBERSHIP_TABLES)):
        op.drop_index(f"{table}_user_id_idx", table_name=table)
        op.drop_table(table)
    for resource_table in ("dashboards", "projects", "folders", "spaces"):
        op.drop_index(f"{resource_table}_owner_id_idx", table_name=resource_table)
        op.drop_table(resource_table)
