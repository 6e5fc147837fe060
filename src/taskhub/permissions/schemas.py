from __future__ import annotations

from typing import Literal
from uuid import UUID

from pydantic import BaseModel  # type: ignore[import-not-found]

from taskhub.permissions.models import ResourceKind, Role


class AccessResponse(BaseModel):
    kind: ResourceKind
    resource_id: UUID
    allowed: bool = True
    role: Role
    can_manage: bool


class GrantMembershipRequest(BaseModel):
    user_id: UUID
    # Ownership lives on the resource row; memberships only carry lesser roles.
    role: Literal["editor", "viewer"] = "viewer"
