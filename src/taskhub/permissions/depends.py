from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Annotated
from uuid import UUID

from fastapi import Depends  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from taskhub.auth.depends import current_user_id_required
from taskhub.commons.depends import database_session, get_query_executor
from taskhub.core.executor import QueryExecutor
from taskhub.permissions.models import ResourceKind, Role
from taskhub.permissions.service import PermissionResolver


def get_permission_resolver(
    executor: Annotated[QueryExecutor, Depends(get_query_executor)],
) -> PermissionResolver:
    return PermissionResolver.create(executor)


def require_resource_access(kind: ResourceKind) -> Callable[..., Awaitable[Role]]:
    """
    Route dependency for resource routers, e.g.

        @router.patch("/projects/{resource_id}")
        async def update(role: Role = Depends(require_resource_access(ResourceKind.PROJECT))):
            ...

    Runs before the handler touches the resource; raises 401/404/403.
    """

    async def _check(
        resource_id: UUID,
        session: Annotated[AsyncSession, Depends(database_session)],
        resolver: Annotated[PermissionResolver, Depends(get_permission_resolver)],
        user_id: Annotated[UUID, Depends(current_user_id_required)],
    ) -> Role:
        return await resolver.require_access(
            session, user_id=user_id, resource_id=resource_id, kind=kind
        )

    return _check
