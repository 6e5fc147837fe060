from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import Depends, Request  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from taskhub.auth.exceptions import Unauthenticated
from taskhub.auth.service import AuthService, extract_bearer
from taskhub.commons.depends import database_session, get_query_executor
from taskhub.core.executor import QueryExecutor


def get_auth_service(
    executor: Annotated[QueryExecutor, Depends(get_query_executor)],
) -> AuthService:
    return AuthService.create(executor)


def bearer_token(request: Request) -> str | None:
    return extract_bearer(request.headers)


async def current_user_id_optional(
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AuthService, Depends(get_auth_service)],
    token: Annotated[str | None, Depends(bearer_token)],
) -> UUID | None:
    if not token:
        return None
    return await svc.validate(session, token=token)


async def current_user_id_required(
    user_id: Annotated[UUID | None, Depends(current_user_id_optional)],
) -> UUID:
    if user_id is None:
        raise Unauthenticated("unauthorized", "Not authenticated")
    return user_id
