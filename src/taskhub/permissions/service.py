from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import exc as sa_exc  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from taskhub.auth.repository import AuthRepository
from taskhub.core.executor import QueryExecutor
from taskhub.permissions.exceptions import (
    AccessDenied,
    InvalidRole,
    ResourceNotFound,
    UserNotFound,
)
from taskhub.permissions.models import Resource, ResourceKind, Role, higher_role
from taskhub.permissions.repository import PermissionsRepository


@dataclass(frozen=True)
class PermissionResolver:
    """
    Decides whether a user may act on a resource.

    Access is the OR of three paths: direct ownership, an explicit membership
    row (any role), or the same on an ancestor container that shares with its
    children. A container that does not share ends the walk upward.
    """

    repo: PermissionsRepository
    users: AuthRepository

    @classmethod
    def create(cls, executor: QueryExecutor) -> "PermissionResolver":
        return cls(
            repo=PermissionsRepository(executor=executor),
            users=AuthRepository(executor=executor),
        )

    async def has_access(
        self,
        session: AsyncSession,
        *,
        user_id: UUID,
        resource_id: UUID,
        kind: ResourceKind | str,
    ) -> bool:
        resource = await self.repo.get_resource(
            session, kind=ResourceKind(kind), resource_id=resource_id
        )
        if resource is None:
            return False
        return await self._resolve(session, user_id=user_id, resource=resource) is not None

    async def resolve_role(
        self,
        session: AsyncSession,
        *,
        user_id: UUID,
        resource_id: UUID,
        kind: ResourceKind | str,
    ) -> Role | None:
        resource = await self.repo.get_resource(
            session, kind=ResourceKind(kind), resource_id=resource_id
        )
        if resource is None:
            return None
        return await self._resolve(session, user_id=user_id, resource=resource)

    async def require_access(
        self,
        session: AsyncSession,
        *,
        user_id: UUID,
        resource_id: UUID,
        kind: ResourceKind | str,
    ) -> Role:
        kind = ResourceKind(kind)
        resource = await self.repo.get_resource(session, kind=kind, resource_id=resource_id)
        if resource is None:
            raise ResourceNotFound("not_found", f"{kind.value.capitalize()} not found")
        role = await self._resolve(session, user_id=user_id, resource=resource)
        if role is None:
            raise AccessDenied("access_denied", "Access denied")
        return role

    async def grant_membership(
        self,
        session: AsyncSession,
        *,
        kind: ResourceKind | str,
        resource_id: UUID,
        user_id: UUID,
        role: Role | str,
    ) -> None:
        kind = ResourceKind(kind)
        try:
            role = Role(role)
        except ValueError as exc:
            raise InvalidRole("invalid_role", f"Unknown role: {role}") from exc
        resource = await self.repo.get_resource(session, kind=kind, resource_id=resource_id)
        if resource is None:
            raise ResourceNotFound("not_found", f"{kind.value.capitalize()} not found")
        if await self.users.get_user_by_id(session, user_id=user_id) is None:
            raise UserNotFound("user_not_found", "User not found")
        try:
            await self.repo.upsert_membership(
                session,
                kind=kind,
                resource_id=resource_id,
                user_id=user_id,
                role=role.value,
            )
        except sa_exc.IntegrityError as exc:
            # The user or resource was deleted after the lookups above.
            await session.rollback()
            raise UserNotFound("user_not_found", "User not found") from exc
        await session.commit()

    async def _direct_role(
        self, session: AsyncSession, *, user_id: UUID, resource: Resource
    ) -> Role | None:
        if resource.owner_id == user_id:
            return Role.OWNER
        raw = await self.repo.get_membership_role(
            session, kind=resource.kind, resource_id=resource.id, user_id=user_id
        )
        return Role.parse(raw)

    async def _resolve(
        self, session: AsyncSession, *, user_id: UUID, resource: Resource
    ) -> Role | None:
        best = await self._direct_role(session, user_id=user_id, resource=resource)
        seen = {(resource.kind, resource.id)}
        ref = resource.parent_ref()
        while ref is not None and ref not in seen and best is not Role.OWNER:
            seen.add(ref)
            parent_kind, parent_id = ref
            parent = await self.repo.get_resource(
                session, kind=parent_kind, resource_id=parent_id
            )
            if parent is None or not parent.shares_with_children:
                break
            best = higher_role(
                best, await self._direct_role(session, user_id=user_id, resource=parent)
            )
            ref = parent.parent_ref()
        return best
