from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from taskhub.auth.schemas import AuthResponse, to_user_public
from taskhub.commons.depends import database_session, get_query_executor
from taskhub.core.executor import QueryExecutor
from taskhub.identity.repository import GoogleIdentityProvider
from taskhub.identity.schemas import ProviderLoginRequest
from taskhub.identity.service import IdentityProvider, IdentityService

router = APIRouter(prefix="/auth", tags=["identity"])


def get_identity_provider() -> IdentityProvider:
    return GoogleIdentityProvider.from_settings()


def get_identity_service(
    executor: Annotated[QueryExecutor, Depends(get_query_executor)],
    provider: Annotated[IdentityProvider, Depends(get_identity_provider)],
) -> IdentityService:
    return IdentityService.create(executor, provider=provider)


@router.post("/google", response_model=AuthResponse)
async def google_login(
    req: ProviderLoginRequest,
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[IdentityService, Depends(get_identity_service)],
) -> AuthResponse:
    user, token = await svc.login_with_provider(session, access_token=req.access_token)
    return AuthResponse(user=to_user_public(user), token=token)
