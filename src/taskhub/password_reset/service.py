from __future__ import annotations

import datetime as dt
from collections.abc import Callable
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from taskhub.auth.crypto import hash_password, new_reset_code, validate_password_strength
from taskhub.auth.repository import AuthRepository
from taskhub.commons.ids import uuid7_uuid
from taskhub.commons.logging import logger
from taskhub.core.executor import QueryExecutor
from taskhub.core.settings import settings
from taskhub.password_reset.exceptions import (
    INVALID_OR_EXPIRED_CODE,
    DeliveryUnavailable,
    InvalidOrExpiredCode,
)
from taskhub.password_reset.models import PasswordResetRequest
from taskhub.password_reset.notifier import ResendNotifier, ResetCodeNotifier
from taskhub.password_reset.repository import PasswordResetRepository


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


@dataclass
class PasswordResetService:
    """
    OTP password reset for one user at a time:

        requested -> delivered | delivery-failed -> verified -> consumed
        requested -> expired

    Each stored code is valid on its own until it expires or is consumed;
    issuing a newer code does not invalidate older ones.
    """

    repo: PasswordResetRepository
    users: AuthRepository
    notifier: ResetCodeNotifier
    clock: Callable[[], dt.datetime] = field(default=_utcnow)

    @classmethod
    def create(
        cls, executor: QueryExecutor, notifier: ResetCodeNotifier | None = None
    ) -> "PasswordResetService":
        return cls(
            repo=PasswordResetRepository(executor=executor),
            users=AuthRepository(executor=executor),
            notifier=notifier or ResendNotifier.from_settings(),
        )

    async def request(self, session: AsyncSession, *, email: str) -> None:
        email = email.strip()
        user = await self.users.get_user_by_email(session, email=email)
        if user is None:
            # Callers report the same generic success for unknown emails.
            return

        now = self.clock()
        code = new_reset_code()
        await self.repo.insert_request(
            session,
            request_id=uuid7_uuid(),
            user_id=user.id,
            code=code,
            expires_at=now + dt.timedelta(minutes=int(settings.PASSWORD_RESET_CODE_TTL_MINUTES)),
            created_at=now,
        )
        await session.commit()

        sent = await self.notifier.send_reset_code(email=email, code=code)
        if not sent:
            raise DeliveryUnavailable(
                "delivery_unavailable",
                "Email service is not configured or failed; no code was sent.",
            )

    async def verify(self, session: AsyncSession, *, email: str, code: str) -> bool:
        return await self._find_usable(session, email=email, code=code) is not None

    async def consume(
        self, session: AsyncSession, *, email: str, code: str, new_password: str
    ) -> None:
        validate_password_strength(new_password)
        row = await self._find_usable(session, email=email, code=code)
        if row is None:
            raise InvalidOrExpiredCode("invalid_or_expired_code", INVALID_OR_EXPIRED_CODE)

        if not await self.repo.mark_used(session, request_id=row.id, now=self.clock()):
            # A concurrent consume won the compare-and-set.
            await session.rollback()
            raise InvalidOrExpiredCode("invalid_or_expired_code", INVALID_OR_EXPIRED_CODE)

        await self.users.set_password_hash(
            session, user_id=row.user_id, password_hash=hash_password(new_password)
        )
        await session.commit()
        logger.info("Password reset completed for user %s", row.user_id)

    async def _find_usable(
        self, session: AsyncSession, *, email: str, code: str
    ) -> PasswordResetRequest | None:
        code = (code or "").strip()
        if not code:
            return None
        user = await self.users.get_user_by_email(session, email=email.strip())
        if user is None:
            return None
        return await self.repo.find_usable(
            session, user_id=user.id, code=code, now=self.clock()
        )
