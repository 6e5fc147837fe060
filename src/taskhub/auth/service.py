from __future__ import annotations

import datetime as dt
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy import exc as sa_exc  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from taskhub.auth.crypto import (
    hash_password,
    hash_session_token,
    new_session_token,
    validate_password_strength,
    verify_password,
)
from taskhub.auth.exceptions import EmailTaken, InvalidCredentials
from taskhub.auth.models import User
from taskhub.auth.repository import AuthRepository
from taskhub.commons.ids import uuid7_uuid
from taskhub.core.executor import QueryExecutor
from taskhub.core.settings import settings


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


def extract_bearer(headers: Mapping[str, str] | None) -> str | None:
    """Return the token from `Authorization: Bearer <token>`, or None."""
    if not headers:
        return None
    raw = None
    for key, value in headers.items():
        if str(key).lower() == "authorization":
            raw = value
            break
    if not isinstance(raw, str):
        return None
    scheme, _, token = raw.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    if not token or any(c.isspace() for c in token):
        return None
    return token


@dataclass
class AuthService:
    repo: AuthRepository
    clock: Callable[[], dt.datetime] = field(default=_utcnow)

    @classmethod
    def create(cls, executor: QueryExecutor) -> "AuthService":
        return cls(repo=AuthRepository(executor=executor))

    async def signup(
        self,
        session: AsyncSession,
        *,
        email: str,
        password: str,
        name: str | None = None,
    ) -> tuple[User, str]:
        email = email.strip()
        validate_password_strength(password)
        existing = await self.repo.get_user_by_email(session, email=email)
        if existing is not None:
            raise EmailTaken("email_taken", "Email already registered")

        try:
            user = await self.repo.insert_user(
                session,
                user_id=uuid7_uuid(),
                email=email,
                name=(name or "").strip() or None,
                avatar_url=None,
                password_hash=hash_password(password),
            )
        except sa_exc.IntegrityError as exc:
            # Lost a race with a concurrent signup for the same email.
            await session.rollback()
            raise EmailTaken("email_taken", "Email already registered") from exc

        token = await self.issue_session(session, user_id=user.id)
        await session.commit()
        return user, token

    async def login(
        self, session: AsyncSession, *, email: str, password: str
    ) -> tuple[User, str]:
        user = await self.repo.get_user_by_email(session, email=email.strip())
        stored_hash = user.password_hash if user is not None else None
        # Always run the verifier so absent / OAuth-only accounts cost the same.
        ok = verify_password(password, stored_hash)
        if user is None or not ok:
            raise InvalidCredentials("invalid_credentials", "Invalid email or password")

        token = await self.issue_session(session, user_id=user.id)
        await session.commit()
        return user, token

    async def validate(self, session: AsyncSession, *, token: str) -> UUID | None:
        if not token:
            return None
        s = await self.repo.get_active_session_by_token_hash(
            session, token_hash=hash_session_token(token), now=self.clock()
        )
        if s is None:
            return None
        return s.user_id

    async def get_user_for_token(
        self, session: AsyncSession, *, token: str
    ) -> User | None:
        user_id = await self.validate(session, token=token)
        if user_id is None:
            return None
        return await self.repo.get_user_by_id(session, user_id=user_id)

    async def revoke(self, session: AsyncSession, *, token: str) -> None:
        if not token:
            return
        await self.repo.delete_session(session, token_hash=hash_session_token(token))
        await session.commit()

    async def issue_session(self, session: AsyncSession, *, user_id: UUID) -> str:
        """Persist a new session for `user_id` and return the raw token.

        Does not commit; the caller owns the transaction.
        """
        token = new_session_token()
        expires_at = self.clock() + dt.timedelta(days=int(settings.AUTH_SESSION_TTL_DAYS))
        await self.repo.insert_session(
            session,
            session_id=uuid7_uuid(),
            user_id=user_id,
            token_hash=hash_session_token(token),
            expires_at=expires_at,
        )
        return token
