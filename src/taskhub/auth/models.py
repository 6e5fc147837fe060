from __future__ import annotations

import datetime as dt
from uuid import UUID

import sqlalchemy as sa  # type: ignore[import-not-found]
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column  # type: ignore[import-not-found]


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(sa.Uuid(), primary_key=True)
    # Stored as given (trimmed); email is the identity key for password and OAuth.
    email: Mapped[str] = mapped_column(sa.Text(), nullable=False, unique=True)
    name: Mapped[str | None] = mapped_column(sa.Text(), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(sa.Text(), nullable=True)
    # NULL for OAuth-only accounts; password login is rejected for them.
    password_hash: Mapped[str | None] = mapped_column(sa.Text(), nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
    )


class UserSession(Base):
    __tablename__ = "user_sessions"

    id: Mapped[UUID] = mapped_column(sa.Uuid(), primary_key=True)
    user_id: Mapped[UUID] = mapped_column(
        sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    # SHA-256 hex digest of the bearer token; the raw token is never stored.
    session_token: Mapped[str] = mapped_column(sa.Text(), nullable=False, unique=True)
    expires_at: Mapped[dt.datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False
    )
    created_at: Mapped[dt.datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
    )
