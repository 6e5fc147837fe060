from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from taskhub.auth.depends import current_user_id_required
from taskhub.auth.schemas import OkResponse
from taskhub.commons.depends import database_session
from taskhub.permissions.depends import get_permission_resolver
from taskhub.permissions.exceptions import AccessDenied
from taskhub.permissions.models import ResourceKind, Role
from taskhub.permissions.schemas import AccessResponse, GrantMembershipRequest
from taskhub.permissions.service import PermissionResolver

router = APIRouter(prefix="/access", tags=["access"])


@router.get("/{kind}/{resource_id}", response_model=AccessResponse)
async def check_access(
    kind: ResourceKind,
    resource_id: UUID,
    session: Annotated[AsyncSession, Depends(database_session)],
    resolver: Annotated[PermissionResolver, Depends(get_permission_resolver)],
    user_id: Annotated[UUID, Depends(current_user_id_required)],
) -> AccessResponse:
    role = await resolver.require_access(
        session, user_id=user_id, resource_id=resource_id, kind=kind
    )
    return AccessResponse(
        kind=kind,
        resource_id=resource_id,
        role=role,
        can_manage=role is Role.OWNER,
    )


@router.post("/{kind}/{resource_id}/members", response_model=OkResponse)
async def grant_membership(
    kind: ResourceKind,
    resource_id: UUID,
    req: GrantMembershipRequest,
    session: Annotated[AsyncSession, Depends(database_session)],
    resolver: Annotated[PermissionResolver, Depends(get_permission_resolver)],
    user_id: Annotated[UUID, Depends(current_user_id_required)],
) -> OkResponse:
    role = await resolver.require_access(
        session, user_id=user_id, resource_id=resource_id, kind=kind
    )
    if role is not Role.OWNER:
        raise AccessDenied("access_denied", "Only the owner can manage members")
    await resolver.grant_membership(
        session, kind=kind, resource_id=resource_id, user_id=req.user_id, role=req.role
    )
    return OkResponse()
