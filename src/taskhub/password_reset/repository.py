from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from uuid import UUID

import sqlalchemy as sa  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from taskhub.core.executor import QueryExecutor
from taskhub.password_reset.models import PasswordResetRequest


@dataclass(frozen=True)
class PasswordResetRepository:
    executor: QueryExecutor

    async def insert_request(
        self,
        session: AsyncSession,
        *,
        request_id: UUID,
        user_id: UUID,
        code: str,
        expires_at: dt.datetime,
        created_at: dt.datetime,
    ) -> PasswordResetRequest:
        row = PasswordResetRequest(
            id=request_id,
            user_id=user_id,
            code=code,
            expires_at=expires_at,
            created_at=created_at,
        )
        session.add(row)
        await self.executor.flush(session)
        return row

    async def find_usable(
        self, session: AsyncSession, *, user_id: UUID, code: str, now: dt.datetime
    ) -> PasswordResetRequest | None:
        stmt = (
            sa.select(PasswordResetRequest)
            .where(PasswordResetRequest.user_id == user_id)
            .where(PasswordResetRequest.code == code)
            .where(PasswordResetRequest.used_at.is_(None))
            .where(PasswordResetRequest.expires_at > now)
            .order_by(PasswordResetRequest.created_at.desc())
            .limit(1)
        )
        res = await self.executor.execute(session, stmt)
        return res.scalar_one_or_none()

    async def mark_used(
        self, session: AsyncSession, *, request_id: UUID, now: dt.datetime
    ) -> bool:
        """Compare-and-set `used_at`; False if another request consumed it first."""
        stmt = (
            sa.update(PasswordResetRequest)
            .where(PasswordResetRequest.id == request_id)
            .where(PasswordResetRequest.used_at.is_(None))
            .values(used_at=now)
            .execution_options(synchronize_session=False)
        )
        res = await self.executor.execute(session, stmt)
        return int(res.rowcount or 0) == 1
