from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

import sqlalchemy as sa  # type: ignore[import-not-found]
from sqlalchemy.dialects.postgresql import insert as pg_insert  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from taskhub.commons.ids import uuid7_uuid
from taskhub.core.executor import QueryExecutor
from taskhub.permissions.models import (
    MEMBERSHIP_MODELS,
    RESOURCE_MODELS,
    Project,
    Resource,
    ResourceKind,
)


@dataclass(frozen=True)
class PermissionsRepository:
    executor: QueryExecutor

    async def get_resource(
        self, session: AsyncSession, *, kind: ResourceKind, resource_id: UUID
    ) -> Resource | None:
        model = RESOURCE_MODELS[kind]
        stmt = sa.select(model).where(model.id == resource_id)
        if model is Project:
            # Soft-deleted projects are treated as missing.
            stmt = stmt.where(Project.deleted_at.is_(None))
        res = await self.executor.execute(session, stmt)
        return res.scalar_one_or_none()

    async def get_membership_role(
        self,
        session: AsyncSession,
        *,
        kind: ResourceKind,
        resource_id: UUID,
        user_id: UUID,
    ) -> str | None:
        model = MEMBERSHIP_MODELS[kind]
        stmt = (
            sa.select(model.role)
            .where(model.resource_id == resource_id)
            .where(model.user_id == user_id)
        )
        res = await self.executor.execute(session, stmt)
        return res.scalar_one_or_none()

    async def upsert_membership(
        self,
        session: AsyncSession,
        *,
        kind: ResourceKind,
        resource_id: UUID,
        user_id: UUID,
        role: str,
    ) -> None:
        model = MEMBERSHIP_MODELS[kind]
        stmt = (
            pg_insert(model)
            .values(id=uuid7_uuid(), resource_id=resource_id, user_id=user_id, role=role)
            .on_conflict_do_update(
                index_elements=[model.resource_id, model.user_id],
                set_={"role": role},
            )
        )
        await self.executor.execute(session, stmt)
