from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from taskhub.auth.depends import bearer_token, get_auth_service
from taskhub.auth.exceptions import Unauthenticated
from taskhub.auth.schemas import (
    AuthResponse,
    LoginRequest,
    MeResponse,
    OkResponse,
    SignupRequest,
    to_user_public,
)
from taskhub.auth.service import AuthService
from taskhub.commons.depends import database_session

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=AuthResponse)
async def signup(
    req: SignupRequest,
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthResponse:
    user, token = await svc.signup(
        session, email=req.email, password=req.password, name=req.name
    )
    return AuthResponse(user=to_user_public(user), token=token)


@router.post("/login", response_model=AuthResponse)
async def login(
    req: LoginRequest,
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthResponse:
    user, token = await svc.login(session, email=req.email, password=req.password)
    return AuthResponse(user=to_user_public(user), token=token)


@router.post("/logout", response_model=OkResponse)
async def logout(
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AuthService, Depends(get_auth_service)],
    token: Annotated[str | None, Depends(bearer_token)],
) -> OkResponse:
    if token:
        await svc.revoke(session, token=token)
    return OkResponse()


@router.get("/me", response_model=MeResponse)
async def me(
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[AuthService, Depends(get_auth_service)],
    token: Annotated[str | None, Depends(bearer_token)],
) -> MeResponse:
    user = await svc.get_user_for_token(session, token=token) if token else None
    if user is None:
        raise Unauthenticated("unauthorized", "Not logged in")
    return MeResponse(user=to_user_public(user))
