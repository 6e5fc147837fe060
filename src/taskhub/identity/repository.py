from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx  # type: ignore[import-not-found]

from taskhub.core.settings import settings


@dataclass
class GoogleIdentityProvider:
    """Exchanges a Google OAuth access token for the account's userinfo."""

    userinfo_url: str
    timeout_s: float
    transport: httpx.AsyncBaseTransport | None = None

    @classmethod
    def from_settings(cls) -> "GoogleIdentityProvider":
        return cls(
            userinfo_url=settings.GOOGLE_USERINFO_URL,
            timeout_s=float(settings.GOOGLE_TIMEOUT_S),
        )

    async def fetch_userinfo(self, *, access_token: str) -> Any:
        """
        GET the userinfo document with the access token as bearer.

        No error handling here (repository rule); service maps failures.
        """
        timeout = httpx.Timeout(self.timeout_s, connect=min(2.0, self.timeout_s))
        async with httpx.AsyncClient(timeout=timeout, transport=self.transport) as client:
            resp = await client.get(
                self.userinfo_url,
                headers={"Authorization": f"Bearer {access_token}"},
            )
            resp.raise_for_status()
            return resp.json()
