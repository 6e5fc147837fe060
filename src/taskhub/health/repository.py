from __future__ import annotations

import sqlalchemy as sa  # type: ignore[import-not-found]

from taskhub.core.db import DatabaseManager
from taskhub.identity.repository import GoogleIdentityProvider
from taskhub.password_reset.notifier import ResendNotifier


async def check_db(manager: DatabaseManager) -> tuple[bool, str | None]:
    try:
        await manager.initialize()
        async with manager.session() as session:
            await manager.executor.execute(session, sa.text("SELECT 1"))
        return True, None
    except Exception as exc:
        return False, str(exc)


def check_mail() -> tuple[bool, str | None]:
    if not ResendNotifier.from_settings().is_configured:
        return False, "not_configured"
    return True, None


def check_identity_provider() -> tuple[bool, str | None, str | None]:
    """Configuration only; /health never calls the provider."""
    url = GoogleIdentityProvider.from_settings().userinfo_url
    if not url:
        return False, None, "not_configured"
    return True, url, None
