"""auth: users + user_sessions

Revision ID: 0001_users_sessions
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa  # type: ignore[import-not-found]

from alembic import op

revision = "0001_users_sessions"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        # NULL for accounts created through OAuth only.
        sa.Column("password_hash", sa.Text(), nullable=True),
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
    )
    op.create_index("users_email_unique", "users", ["email"], unique=True)

    op.create_table(
        "user_sessions",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        # SHA-256 of the bearer token (the client holds the raw token).
        sa.Column("session_token", sa.Text(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    )
    op.create_index("user_sessions_user_id_idx", "user_sessions", ["user_id"], unique=False)
    op.create_index(
        "user_sessions_session_token_unique", "user_sessions", ["session_token"], unique=True
    )


def downgrade() -> None:
    op.drop_index("user_sessions_session_token_unique", table_name="user_sessions")
    op.drop_index("user_sessions_user_id_idx", table_name="user_sessions")
    op.drop_table("user_sessions")

    op.drop_index("users_email_unique", table_name="users")
    op.drop_table("users")
