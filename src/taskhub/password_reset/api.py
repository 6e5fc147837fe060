from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from taskhub.auth.schemas import OkResponse
from taskhub.commons.depends import database_session, get_query_executor
from taskhub.core.executor import QueryExecutor
from taskhub.password_reset.exceptions import (
    INVALID_OR_EXPIRED_CODE,
    InvalidOrExpiredCode,
)
from taskhub.password_reset.notifier import ResendNotifier, ResetCodeNotifier
from taskhub.password_reset.schemas import (
    ForgotPasswordRequest,
    MessageResponse,
    ResetPasswordRequest,
    VerifyResetCodeRequest,
)
from taskhub.password_reset.service import PasswordResetService

router = APIRouter(prefix="/auth", tags=["password-reset"])

GENERIC_REQUEST_MESSAGE = "If this email exists, we sent an OTP."


def get_reset_notifier() -> ResetCodeNotifier:
    return ResendNotifier.from_settings()


def get_password_reset_service(
    executor: Annotated[QueryExecutor, Depends(get_query_executor)],
    notifier: Annotated[ResetCodeNotifier, Depends(get_reset_notifier)],
) -> PasswordResetService:
    return PasswordResetService.create(executor, notifier=notifier)


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    req: ForgotPasswordRequest,
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[PasswordResetService, Depends(get_password_reset_service)],
) -> MessageResponse:
    await svc.request(session, email=req.email)
    return MessageResponse(message=GENERIC_REQUEST_MESSAGE)


@router.post("/verify-reset-otp", response_model=OkResponse)
async def verify_reset_otp(
    req: VerifyResetCodeRequest,
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[PasswordResetService, Depends(get_password_reset_service)],
) -> OkResponse:
    if not await svc.verify(session, email=req.email, code=req.otp):
        raise InvalidOrExpiredCode("invalid_or_expired_code", INVALID_OR_EXPIRED_CODE)
    return OkResponse()


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    req: ResetPasswordRequest,
    session: Annotated[AsyncSession, Depends(database_session)],
    svc: Annotated[PasswordResetService, Depends(get_password_reset_service)],
) -> MessageResponse:
    await svc.consume(
        session, email=req.email, code=req.otp, new_password=req.new_password
    )
    return MessageResponse(message="Password reset successfully.")
