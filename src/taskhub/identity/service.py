from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

import httpx  # type: ignore[import-not-found]
from sqlalchemy import exc as sa_exc  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from taskhub.auth.models import User
from taskhub.auth.service import AuthService
from taskhub.commons.ids import uuid7_uuid
from taskhub.commons.logging import logger
from taskhub.core.executor import QueryExecutor
from taskhub.identity.exceptions import InvalidProviderToken, UpstreamIdentityFailure
from taskhub.identity.repository import GoogleIdentityProvider
from taskhub.identity.schemas import ProviderProfile


class IdentityProvider(Protocol):
    async def fetch_userinfo(self, *, access_token: str) -> Any: ...


def _optional_str(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def parse_profile(data: Any) -> ProviderProfile:
    if not isinstance(data, dict):
        raise UpstreamIdentityFailure(
            "provider_bad_payload", "Identity provider returned an unexpected payload"
        )
    email = _optional_str(data.get("email"))
    if email is None:
        raise InvalidProviderToken(
            "invalid_provider_token", "Email not provided by identity provider"
        )
    return ProviderProfile(
        email=email,
        name=_optional_str(data.get("name")),
        picture=_optional_str(data.get("picture")),
    )


@dataclass
class IdentityService:
    auth: AuthService
    provider: IdentityProvider

    @classmethod
    def create(
        cls, executor: QueryExecutor, provider: IdentityProvider | None = None
    ) -> "IdentityService":
        return cls(
            auth=AuthService.create(executor),
            provider=provider or GoogleIdentityProvider.from_settings(),
        )

    async def fetch_profile(self, *, access_token: str) -> ProviderProfile:
        try:
            data = await self.provider.fetch_userinfo(access_token=access_token)
        except httpx.HTTPStatusError as exc:
            raise InvalidProviderToken(
                "invalid_provider_token", "Identity provider rejected the access token"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Identity provider exchange failed: %s", exc)
            raise UpstreamIdentityFailure(
                "provider_unavailable", "Identity provider exchange failed"
            ) from exc
        return parse_profile(data)

    async def login_with_provider(
        self, session: AsyncSession, *, access_token: str
    ) -> tuple[User, str]:
        profile = await self.fetch_profile(access_token=access_token)
        user = await self._resolve_user(session, profile=profile)
        token = await self.auth.issue_session(session, user_id=user.id)
        await session.commit()
        return user, token

    async def _resolve_user(
        self, session: AsyncSession, *, profile: ProviderProfile
    ) -> User:
        users = self.auth.repo
        existing = await users.get_user_by_email(session, email=profile.email)
        if existing is not None:
            return await users.merge_profile(
                session, user=existing, name=profile.name, avatar_url=profile.picture
            )

        try:
            user = await users.insert_user(
                session,
                user_id=uuid7_uuid(),
                email=profile.email,
                name=profile.name,
                avatar_url=profile.picture,
                password_hash=None,
            )
        except sa_exc.IntegrityError:
            # A concurrent first login created the row; merge into it instead.
            await session.rollback()
            existing = await users.get_user_by_email(session, email=profile.email)
            if existing is None:
                raise
            return await users.merge_profile(
                session, user=existing, name=profile.name, avatar_url=profile.picture
            )
        logger.info("Created OAuth-only user %s", user.id)
        return user
