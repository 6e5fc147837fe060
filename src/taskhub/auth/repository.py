from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from uuid import UUID

import sqlalchemy as sa  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from taskhub.auth.models import User, UserSession
from taskhub.core.executor import QueryExecutor


@dataclass(frozen=True)
class AuthRepository:
    executor: QueryExecutor

    async def get_user_by_email(
        self, session: AsyncSession, *, email: str
    ) -> User | None:
        stmt = sa.select(User).where(User.email == email)
        res = await self.executor.execute(session, stmt)
        return res.scalar_one_or_none()

    async def get_user_by_id(self, session: AsyncSession, *, user_id: UUID) -> User | None:
        stmt = sa.select(User).where(User.id == user_id)
        res = await self.executor.execute(session, stmt)
        return res.scalar_one_or_none()

    async def insert_user(
        self,
        session: AsyncSession,
        *,
        user_id: UUID,
        email: str,
        name: str | None,
        avatar_url: str | None,
        password_hash: str | None,
    ) -> User:
        now = dt.datetime.now(dt.UTC)
        user = User(
            id=user_id,
            email=email,
            name=name,
            avatar_url=avatar_url,
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
        )
        session.add(user)
        await self.executor.flush(session)
        return user

    async def merge_profile(
        self,
        session: AsyncSession,
        *,
        user: User,
        name: str | None,
        avatar_url: str | None,
    ) -> User:
        # Only non-null provider values overwrite; stored values survive a NULL.
        if name is not None:
            user.name = name
        if avatar_url is not None:
            user.avatar_url = avatar_url
        user.updated_at = dt.datetime.now(dt.UTC)
        await self.executor.flush(session)
        return user

    async def set_password_hash(
        self, session: AsyncSession, *, user_id: UUID, password_hash: str
    ) -> None:
        stmt = (
            sa.update(User)
            .where(User.id == user_id)
            .values(password_hash=password_hash, updated_at=sa.func.now())
            .execution_options(synchronize_session=False)
        )
        await self.executor.execute(session, stmt)
        await self.executor.flush(session)

    async def insert_session(
        self,
        session: AsyncSession,
        *,
        session_id: UUID,
        user_id: UUID,
        token_hash: str,
        expires_at: dt.datetime,
    ) -> UserSession:
        s = UserSession(
            id=session_id,
            user_id=user_id,
            session_token=token_hash,
            expires_at=expires_at,
        )
        session.add(s)
        await self.executor.flush(session)
        return s

    async def get_active_session_by_token_hash(
        self, session: AsyncSession, *, token_hash: str, now: dt.datetime
    ) -> UserSession | None:
        stmt = (
            sa.select(UserSession)
            .where(UserSession.session_token == token_hash)
            .where(UserSession.expires_at > now)
        )
        res = await self.executor.execute(session, stmt)
        return res.scalar_one_or_none()

    async def delete_session(self, session: AsyncSession, *, token_hash: str) -> int:
        stmt = sa.delete(UserSession).where(UserSession.session_token == token_hash)
        res = await self.executor.execute(session, stmt)
        await self.executor.flush(session)
        return int(res.rowcount or 0)
