"""password reset OTP requests

Revision ID: 0002_password_resets
Revises: 0001_users_sessions
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa  # type: ignore[import-not-found]

from alembic import op

revision = "0002_password_resets"
down_revision = "0001_users_sessions"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "password_resets",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        # 4-digit OTP
        sa.Column("token", sa.Text(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    )
    op.create_index(
        "password_resets_lookup_idx",
        "password_resets",
        ["user_id", "token", "created_at"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("password_resets_lookup_idx", table_name="password_resets")
    op.drop_table("password_resets")
