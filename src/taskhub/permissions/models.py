"""
Permission-bearing resources.

Only the columns the access check reads live here; the CRUD routers that own
these tables add their own columns through migrations. Containment:

    space -> folder -> project | dashboard
"""

from __future__ import annotations

import datetime as dt
import enum
from uuid import UUID

import sqlalchemy as sa  # type: ignore[import-not-found]
from sqlalchemy.orm import Mapped, declared_attr, mapped_column  # type: ignore[import-not-found]

from taskhub.auth.models import Base


class ResourceKind(str, enum.Enum):
    SPACE = "space"
    FOLDER = "folder"
    PROJECT = "project"
    DASHBOARD = "dashboard"


class Role(str, enum.Enum):
    OWNER = "owner"
    EDITOR = "editor"
    VIEWER = "viewer"

    @property
    def rank(self) -> int:
        return _ROLE_RANK[self]

    @classmethod
    def parse(cls, value: str | None) -> "Role | None":
        if value is None:
            return None
        try:
            return cls(value)
        except ValueError:
            # Legacy role names ("admin", "member") still grant access.
            return cls.EDITOR if value == "admin" else cls.VIEWER


_ROLE_RANK = {Role.OWNER: 3, Role.EDITOR: 2, Role.VIEWER: 1}


def higher_role(a: Role | None, b: Role | None) -> Role | None:
    if a is None:
        return b
    if b is None:
        return a
    return a if a.rank >= b.rank else b


ParentRef = tuple[ResourceKind, UUID]


class Space(Base):
    __tablename__ = "spaces"
    kind = ResourceKind.SPACE

    id: Mapped[UUID] = mapped_column(sa.Uuid(), primary_key=True)
    name: Mapped[str] = mapped_column(sa.Text(), nullable=False)
    owner_id: Mapped[UUID] = mapped_column(
        sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    is_private: Mapped[bool] = mapped_column(
        sa.Boolean(), nullable=False, server_default=sa.false()
    )

    def parent_ref(self) -> ParentRef | None:
        return None

    @property
    def shares_with_children(self) -> bool:
        return not self.is_private


class Folder(Base):
    __tablename__ = "folders"
    kind = ResourceKind.FOLDER

    id: Mapped[UUID] = mapped_column(sa.Uuid(), primary_key=True)
    name: Mapped[str] = mapped_column(sa.Text(), nullable=False)
    owner_id: Mapped[UUID] = mapped_column(
        sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    space_id: Mapped[UUID | None] = mapped_column(
        sa.Uuid(), sa.ForeignKey("spaces.id", ondelete="SET NULL"), nullable=True
    )

    def parent_ref(self) -> ParentRef | None:
        return (ResourceKind.SPACE, self.space_id) if self.space_id else None

    @property
    def shares_with_children(self) -> bool:
        # Folders carry no sharing flag of their own.
        return True


class Project(Base):
    __tablename__ = "projects"
    kind = ResourceKind.PROJECT

    id: Mapped[UUID] = mapped_column(sa.Uuid(), primary_key=True)
    name: Mapped[str] = mapped_column(sa.Text(), nullable=False)
    owner_id: Mapped[UUID] = mapped_column(
        sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    folder_id: Mapped[UUID | None] = mapped_column(
        sa.Uuid(), sa.ForeignKey("folders.id", ondelete="SET NULL"), nullable=True
    )
    workspace_shared: Mapped[bool] = mapped_column(
        sa.Boolean(), nullable=False, server_default=sa.false()
    )
    deleted_at: Mapped[dt.datetime | None] = mapped_column(
        sa.DateTime(timezone=True), nullable=True
    )

    def parent_ref(self) -> ParentRef | None:
        return (ResourceKind.FOLDER, self.folder_id) if self.folder_id else None

    @property
    def shares_with_children(self) -> bool:
        return False


class Dashboard(Base):
    __tablename__ = "dashboards"
    kind = ResourceKind.DASHBOARD

    id: Mapped[UUID] = mapped_column(sa.Uuid(), primary_key=True)
    name: Mapped[str] = mapped_column(sa.Text(), nullable=False)
    owner_id: Mapped[UUID] = mapped_column(
        sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    folder_id: Mapped[UUID | None] = mapped_column(
        sa.Uuid(), sa.ForeignKey("folders.id", ondelete="SET NULL"), nullable=True
    )
    workspace_shared: Mapped[bool] = mapped_column(
        sa.Boolean(), nullable=False, server_default=sa.false()
    )

    def parent_ref(self) -> ParentRef | None:
        return (ResourceKind.FOLDER, self.folder_id) if self.folder_id else None

    @property
    def shares_with_children(self) -> bool:
        return False


Resource = Space | Folder | Project | Dashboard


class MembershipMixin:
    id: Mapped[UUID] = mapped_column(sa.Uuid(), primary_key=True)
    role: Mapped[str] = mapped_column(sa.Text(), nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
    )

    @declared_attr
    def user_id(cls) -> Mapped[UUID]:
        return mapped_column(
            sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
        )


def _membership_table_args(table: str) -> tuple:
    return (
        sa.UniqueConstraint("resource_id", "user_id", name=f"{table}_resource_user_unique"),
    )


class SpaceMember(MembershipMixin, Base):
    __tablename__ = "space_members"
    __table_args__ = _membership_table_args("space_members")

    resource_id: Mapped[UUID] = mapped_column(
        sa.Uuid(), sa.ForeignKey("spaces.id", ondelete="CASCADE"), nullable=False
    )


class FolderMember(MembershipMixin, Base):
    __tablename__ = "folder_members"
    __table_args__ = _membership_table_args("folder_members")

    resource_id: Mapped[UUID] = mapped_column(
        sa.Uuid(), sa.ForeignKey("folders.id", ondelete="CASCADE"), nullable=False
    )


class ProjectMember(MembershipMixin, Base):
    __tablename__ = "project_members"
    __table_args__ = _membership_table_args("project_members")

    resource_id: Mapped[UUID] = mapped_column(
        sa.Uuid(), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )


class DashboardMember(MembershipMixin, Base):
    __tablename__ = "dashboard_members"
    __table_args__ = _membership_table_args("dashboard_members")

    resource_id: Mapped[UUID] = mapped_column(
        sa.Uuid(), sa.ForeignKey("dashboards.id", ondelete="CASCADE"), nullable=False
    )


RESOURCE_MODELS: dict[ResourceKind, type[Resource]] = {
    ResourceKind.SPACE: Space,
    ResourceKind.FOLDER: Folder,
    ResourceKind.PROJECT: Project,
    ResourceKind.DASHBOARD: Dashboard,
}

MEMBERSHIP_MODELS: dict[ResourceKind, type[MembershipMixin]] = {
    ResourceKind.SPACE: SpaceMember,
    ResourceKind.FOLDER: FolderMember,
    ResourceKind.PROJECT: ProjectMember,
    ResourceKind.DASHBOARD: DashboardMember,
}
