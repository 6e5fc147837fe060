from __future__ import annotations

import datetime as dt
from uuid import uuid4

import pytest  # type: ignore[import-not-found]
from sqlalchemy.dialects import postgresql  # type: ignore[import-not-found]

from taskhub.auth.models import User
from taskhub.auth.repository import AuthRepository

pytestmark = pytest.mark.anyio

CREATED = dt.datetime(2025, 6, 1, tzinfo=dt.UTC)


def _user() -> User:
    return User(
        id=uuid4(),
        email="ada@example.com",
        name="Ada",
        avatar_url="https://img.example.com/ada.png",
        password_hash=None,
        created_at=CREATED,
        updated_at=CREATED,
    )


async def test_merge_profile_keeps_stored_values_on_null(executor) -> None:  # type: ignore[no-untyped-def]
    repo = AuthRepository(executor=executor)
    user = _user()

    merged = await repo.merge_profile(None, user=user, name=None, avatar_url=None)

    assert merged is user
    assert user.name == "Ada"
    assert user.avatar_url == "https://img.example.com/ada.png"
    assert user.updated_at > CREATED
    assert executor.flushes == 1


async def test_merge_profile_overwrites_with_provider_values(executor) -> None:  # type: ignore[no-untyped-def]
    repo = AuthRepository(executor=executor)
    user = _user()

    await repo.merge_profile(None, user=user, name="Ada L.", avatar_url=None)

    assert user.name == "Ada L."
    assert user.avatar_url == "https://img.example.com/ada.png"
    assert executor.flushes == 1


async def test_email_lookup_is_an_exact_match(executor) -> None:  # type: ignore[no-untyped-def]
    repo = AuthRepository(executor=executor)
    await repo.get_user_by_email(None, email="Ada@Example.COM")

    compiled = executor.statements[-1].compile(dialect=postgresql.dialect())
    sql = " ".join(str(compiled).split())
    assert "users.email = " in sql
    assert "lower" not in sql.lower()
    assert "Ada@Example.COM" in compiled.params.values()
